import uuid
from dataclasses import dataclass

import structlog
from django.utils import timezone

from .. import config
from ..data import repos
from ..domain.enums import ONBOARDING_STATUSES, LearningStatus
from ..domain.errors import ConflictError, InvalidArgumentError, UnauthorizedError
from ..domain.logic import advance_lifecycle, parse_rating, schedule
from ..utils.time import days_from, today

logger = structlog.get_logger()


@dataclass
class ReviewOutcome:
    card: object
    record: object
    previous_status: LearningStatus
    graduated: bool

    @property
    def was_new_card(self):
        return self.previous_status in ONBOARDING_STATUSES


def require_user(user):
    if user is None or not getattr(user, "is_authenticated", False):
        raise UnauthorizedError("Unauthorized")


def normalize_deck_ids(deck_ids):
    """Validate a deck-id list and return it as de-duplicated UUIDs, order preserved."""
    if not deck_ids or isinstance(deck_ids, (str, bytes)):
        raise InvalidArgumentError("At least one deck is required")
    normalized = []
    for value in deck_ids:
        try:
            deck_id = uuid.UUID(str(value))
        except ValueError:
            raise InvalidArgumentError(f"Invalid deck id {value!r}") from None
        if deck_id not in normalized:
            normalized.append(deck_id)
    return normalized


def validate_daily_limit(limit):
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError("Daily new cards limit must be an integer")
    if not config.MIN_DAILY_NEW_CARDS_LIMIT <= limit <= config.MAX_DAILY_NEW_CARDS_LIMIT:
        raise InvalidArgumentError(
            f"Daily new cards limit must be between {config.MIN_DAILY_NEW_CARDS_LIMIT} "
            f"and {config.MAX_DAILY_NEW_CARDS_LIMIT}"
        )
    return limit


def record_review(
    card,
    rating,
    *,
    user,
    was_marked_correct=False,
    review_session=None,
    daily_session=None,
    expected_version=None,
):
    """
    Apply one answer to *card*: scheduler + lifecycle, conditional card write
    and a history row. Must run inside the caller's transaction.
    """
    rating = parse_rating(rating)
    if expected_version is not None and card.version != expected_version:
        raise ConflictError("Card was modified by another review, reload and try again")

    previous_status = LearningStatus(card.learning_status)
    read_version = card.version

    result = schedule(rating, card.ease_factor, card.repetition_count, card.interval)
    lifecycle = advance_lifecycle(
        previous_status,
        card.correct_count,
        rating,
        was_marked_correct,
        threshold=config.graduation_threshold(),
    )

    now = timezone.now()
    card.ease_factor = result.ease_factor
    card.repetition_count = result.repetition_count
    card.interval = result.interval
    card.next_review_date = days_from(today(), result.interval)
    card.last_reviewed_at = now
    card.learning_status = lifecycle.status.value
    card.correct_count = lifecycle.correct_count
    if lifecycle.graduated:
        card.graduated_at = now

    repos.save_card(card, read_version)
    record = repos.append_review_record(
        user=user,
        card=card,
        review_session=review_session,
        daily_session=daily_session,
        rating=rating.value,
        was_new_card=previous_status in ONBOARDING_STATUSES,
        previous_status=previous_status.value,
        reviewed_at=now,
    )

    logger.info(
        "review_scheduled",
        card_id=str(card.pk),
        rating=rating.value,
        ease_factor=card.ease_factor,
        repetition_count=card.repetition_count,
        interval_days=card.interval,
        next_review_date=card.next_review_date.isoformat(),
        learning_status=card.learning_status,
        graduated=lifecycle.graduated,
    )
    return ReviewOutcome(card, record, previous_status, lifecycle.graduated)


def retry_on_conflict(operation, *, attempts):
    """
    Run *operation* again when it loses an optimistic-concurrency race.

    Each attempt must re-read its state; the last ConflictError propagates.
    """
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ConflictError:
            if attempt >= attempts:
                logger.warning("review_conflict_exhausted", attempts=attempts)
                raise
            logger.info("review_conflict_retry", attempt=attempt)
