"""
Daily learning sessions: a capped number of new-card introductions per day on
top of every due review, across a union of decks (optionally a saved lesson).

One active session per user per calendar day; starting again that day resumes it.
"""
from dataclasses import dataclass
from typing import List, Optional

import structlog
from django.db import transaction

from .. import config
from ..data import repos
from ..data.models import DailyLearningSession
from ..domain.errors import InvalidStateError
from ..domain.logic import parse_rating
from ..utils.time import today
from .reviews import (
    normalize_deck_ids,
    record_review,
    require_user,
    retry_on_conflict,
    validate_daily_limit,
)

logger = structlog.get_logger()


@dataclass
class DailySessionStart:
    session: DailyLearningSession
    cards: List
    decks: List
    is_resumed: bool


def select_cards(session: DailyLearningSession, as_of=None):
    """
    Due introduced cards (never capped) followed by the oldest new cards,
    up to what is left of the session's new-card quota.
    """
    as_of = as_of or today()
    due = repos.find_due_introduced_cards(session.deck_ids, as_of)
    remaining = session.daily_new_cards_limit - repos.count_introduced_new_cards(session)
    return due + repos.find_new_cards(session.deck_ids, remaining)


def start_or_resume(
    user,
    deck_ids=None,
    daily_new_cards_limit: Optional[int] = None,
    lesson_id=None,
) -> DailySessionStart:
    require_user(user)

    lesson = None
    if lesson_id is not None:
        # Saved configuration wins over whatever was passed in
        lesson = repos.get_lesson(lesson_id, user)
        deck_ids = lesson.deck_ids
        daily_new_cards_limit = lesson.daily_new_cards_limit

    deck_ids = normalize_deck_ids(deck_ids)
    if daily_new_cards_limit is None:
        daily_new_cards_limit = config.default_daily_new_cards_limit()
    validate_daily_limit(daily_new_cards_limit)
    repos.get_owned_decks(user, deck_ids)

    study_date = today()
    session = repos.get_active_daily_session(user, study_date)
    is_resumed = session is not None
    if session is None:
        session, created = repos.create_daily_session(
            user, study_date, deck_ids, daily_new_cards_limit, lesson=lesson
        )
        is_resumed = not created

    cards = select_cards(session, study_date)
    decks = repos.get_owned_decks(user, session.deck_ids, strict=False)
    logger.info(
        "daily_session_started",
        user_id=str(user.pk),
        session_id=str(session.pk),
        lesson_id=str(lesson.pk) if lesson else None,
        cards=len(cards),
        new_cards_limit=session.daily_new_cards_limit,
        resumed=is_resumed,
    )
    return DailySessionStart(session, cards, decks, is_resumed)


def get(user, session_id) -> DailyLearningSession:
    require_user(user)
    return repos.get_daily_session(session_id, user)


def active_for_today(user) -> Optional[DailyLearningSession]:
    require_user(user)
    return repos.get_active_daily_session(user, today())


def submit_review(
    user, session_id, card_id, rating, was_marked_correct=False, expected_version=None
):
    """Answer one card in an active daily session. Returns (card, session)."""
    require_user(user)
    rating = parse_rating(rating)

    def attempt():
        with transaction.atomic():
            session = repos.get_daily_session(session_id, user)
            if not session.is_active:
                raise InvalidStateError("Session has ended")
            card = repos.get_card(card_id, user)
            if str(card.deck_id) not in session.deck_ids:
                raise InvalidStateError("Card does not belong to the session decks")

            outcome = record_review(
                card,
                rating,
                user=user,
                was_marked_correct=bool(was_marked_correct),
                daily_session=session,
                expected_version=expected_version,
            )
            session = repos.bump_daily_session(
                session, was_new_card=outcome.was_new_card, graduated=outcome.graduated
            )
            return outcome.card, session

    attempts = 1 if expected_version is not None else config.conflict_retry_attempts()
    card, session = retry_on_conflict(attempt, attempts=attempts)
    logger.info(
        "daily_session_answer",
        session_id=str(session.pk),
        card_id=str(card.pk),
        cards_studied=session.cards_studied,
        cards_learned=session.cards_learned,
    )
    return card, session


def end(user, session_id) -> DailyLearningSession:
    require_user(user)
    session = repos.end_session(repos.get_daily_session(session_id, user))
    logger.info(
        "daily_session_ended",
        session_id=str(session.pk),
        cards_studied=session.cards_studied,
        cards_learned=session.cards_learned,
        duration_seconds=session.duration_seconds,
    )
    return session
