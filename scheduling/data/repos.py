from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from ..domain.enums import GRADUATED_STATUSES, LearningStatus
from ..domain.errors import ConflictError, InvalidStateError, NotFoundError
from .models import (
    Card,
    DailyLearningSession,
    Deck,
    LearningLesson,
    ReviewRecord,
    ReviewSession,
    deck_key,
)

INTRODUCED_STATUSES = [LearningStatus.LEARNING.value] + [s.value for s in GRADUATED_STATUSES]
SCHEDULING_FIELDS = (
    "ease_factor",
    "interval",
    "repetition_count",
    "next_review_date",
    "last_reviewed_at",
    "learning_status",
    "correct_count",
    "graduated_at",
)


def _get_or_not_found(queryset, pk, label):
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError(f"{label} not found") from None


# Cards

def get_card(card_id, user):
    """Card visible to *user*; cards in other users' decks are reported as missing."""
    return _get_or_not_found(
        Card.objects.select_related("deck").filter(deck__user=user), card_id, "Card"
    )


def save_card(card, expected_version):
    """
    Conditional write of the scheduling fields.

    Only succeeds if the row still carries *expected_version*; a concurrent
    writer that got there first makes this raise ConflictError.
    """
    values = {name: getattr(card, name) for name in SCHEDULING_FIELDS}
    now = timezone.now()
    updated = Card.objects.filter(pk=card.pk, version=expected_version).update(
        **values, version=expected_version + 1, updated_at=now
    )
    if updated == 0:
        raise ConflictError("Card was modified by another review, reload and try again")
    card.version = expected_version + 1
    card.updated_at = now
    return card


def find_due_cards(deck_ids, as_of):
    """Every card due on or before *as_of*, oldest-overdue first."""
    return list(
        Card.objects.filter(deck_id__in=deck_ids, next_review_date__lte=as_of)
        .order_by("next_review_date", "id")
    )


def find_due_introduced_cards(deck_ids, as_of):
    """Due cards that are past their first introduction (learning or graduated)."""
    return list(
        Card.objects.filter(
            deck_id__in=deck_ids,
            next_review_date__lte=as_of,
            learning_status__in=INTRODUCED_STATUSES,
        ).order_by("next_review_date", "id")
    )


def find_new_cards(deck_ids, limit):
    if limit <= 0:
        return []
    return list(
        Card.objects.filter(deck_id__in=deck_ids, learning_status=LearningStatus.NEW.value)
        .order_by("created_at", "id")[:limit]
    )


# Review history

def append_review_record(**fields):
    return ReviewRecord.objects.create(**fields)


def count_introduced_new_cards(daily_session):
    """
    Distinct cards that were still ``new`` when answered in any daily session
    of the same user on the same study date as *daily_session*.
    """
    return (
        ReviewRecord.objects.filter(
            user_id=daily_session.user_id,
            daily_session__study_date=daily_session.study_date,
            previous_status=LearningStatus.NEW.value,
        )
        .values("card_id")
        .distinct()
        .count()
    )


# Decks and lessons

def get_owned_decks(user, deck_ids, strict=True):
    decks = list(Deck.objects.filter(user=user, id__in=deck_ids).order_by("name", "id"))
    if strict and len(decks) != len(set(deck_ids)):
        raise NotFoundError("Some decks do not exist or do not belong to you")
    return decks


def get_lesson(lesson_id, user):
    return _get_or_not_found(LearningLesson.objects.filter(user=user), lesson_id, "Learning lesson")


# Review sessions

def get_review_session(session_id, user):
    return _get_or_not_found(ReviewSession.objects.filter(user=user), session_id, "Session")


def get_active_review_session(user, deck_ids):
    return ReviewSession.objects.filter(
        user=user, deck_key=deck_key(deck_ids), ended_at__isnull=True
    ).first()


def create_review_session(user, deck_ids, total_cards=0):
    """
    Create the active session for this deck set, or return the one a
    concurrent caller created first. Returns (session, created).
    """
    ids = sorted({str(d) for d in deck_ids})
    try:
        with transaction.atomic():
            return ReviewSession.objects.create(
                user=user, deck_ids=ids, deck_key=deck_key(ids), total_cards=total_cards
            ), True
    except IntegrityError:
        # Partial unique constraint: someone else won the race
        existing = get_active_review_session(user, ids)
        if existing is None:
            raise
        return existing, False


def bump_review_session(session):
    updated = ReviewSession.objects.filter(pk=session.pk, ended_at__isnull=True).update(
        cards_reviewed=F("cards_reviewed") + 1
    )
    if updated == 0:
        raise InvalidStateError("Session has ended")
    session.refresh_from_db()
    return session


# Daily learning sessions

def get_daily_session(session_id, user):
    return _get_or_not_found(DailyLearningSession.objects.filter(user=user), session_id, "Session")


def get_active_daily_session(user, study_date):
    return (
        DailyLearningSession.objects.filter(user=user, study_date=study_date, ended_at__isnull=True)
        .order_by("started_at")
        .first()
    )


def create_daily_session(user, study_date, deck_ids, daily_new_cards_limit, lesson=None):
    """Same race handling as create_review_session, scoped to one calendar day."""
    ids = sorted({str(d) for d in deck_ids})
    try:
        with transaction.atomic():
            return DailyLearningSession.objects.create(
                user=user,
                lesson=lesson,
                deck_ids=ids,
                daily_new_cards_limit=daily_new_cards_limit,
                study_date=study_date,
            ), True
    except IntegrityError:
        existing = get_active_daily_session(user, study_date)
        if existing is None:
            raise
        return existing, False


def bump_daily_session(session, *, was_new_card, graduated):
    counters = {"cards_studied": F("cards_studied") + 1}
    if graduated:
        counters["cards_learned"] = F("cards_learned") + 1
    if was_new_card:
        counters["new_cards_today"] = F("new_cards_today") + 1
    else:
        counters["review_cards_today"] = F("review_cards_today") + 1

    updated = DailyLearningSession.objects.filter(pk=session.pk, ended_at__isnull=True).update(
        **counters
    )
    if updated == 0:
        raise InvalidStateError("Session has ended")
    session.refresh_from_db()
    return session


# Both kinds

def end_session(session):
    """Stamp ``ended_at``; a session can only be ended once."""
    now = timezone.now()
    updated = type(session).objects.filter(pk=session.pk, ended_at__isnull=True).update(ended_at=now)
    if updated == 0:
        raise InvalidStateError("Session already ended")
    session.ended_at = now
    return session
