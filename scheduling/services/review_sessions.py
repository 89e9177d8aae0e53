"""
Unbounded review sessions: clear every due card in a deck set, resumable.
"""
from dataclasses import dataclass
from typing import List

import structlog
from django.db import transaction

from .. import config
from ..data import repos
from ..data.models import ReviewSession
from ..domain.errors import InvalidStateError
from ..domain.logic import parse_rating
from ..utils.time import today
from .reviews import normalize_deck_ids, record_review, require_user, retry_on_conflict

logger = structlog.get_logger()


@dataclass
class SessionStart:
    session: ReviewSession
    cards: List
    is_resumed: bool


def start_or_resume(user, deck_ids) -> SessionStart:
    require_user(user)
    deck_ids = normalize_deck_ids(deck_ids)
    repos.get_owned_decks(user, deck_ids)

    session = repos.get_active_review_session(user, deck_ids)
    cards = repos.find_due_cards(deck_ids, today())
    is_resumed = session is not None
    if session is None:
        session, created = repos.create_review_session(user, deck_ids, total_cards=len(cards))
        is_resumed = not created

    logger.info(
        "review_session_started",
        user_id=str(user.pk),
        session_id=str(session.pk),
        deck_count=len(deck_ids),
        due_cards=len(cards),
        resumed=is_resumed,
    )
    return SessionStart(session, cards, is_resumed)


def get(user, session_id) -> ReviewSession:
    require_user(user)
    return repos.get_review_session(session_id, user)


def submit_review(user, session_id, card_id, rating, expected_version=None):
    """Answer one card in an active review session. Returns (card, session)."""
    require_user(user)
    rating = parse_rating(rating)

    def attempt():
        with transaction.atomic():
            session = repos.get_review_session(session_id, user)
            if not session.is_active:
                raise InvalidStateError("Session has ended")
            card = repos.get_card(card_id, user)
            if str(card.deck_id) not in session.deck_ids:
                raise InvalidStateError("Card does not belong to the session decks")

            outcome = record_review(
                card,
                rating,
                user=user,
                review_session=session,
                expected_version=expected_version,
            )
            return outcome.card, repos.bump_review_session(session)

    # A caller-supplied version pins the starting state, so it is never retried
    attempts = 1 if expected_version is not None else config.conflict_retry_attempts()
    card, session = retry_on_conflict(attempt, attempts=attempts)
    logger.info(
        "review_session_answer",
        session_id=str(session.pk),
        card_id=str(card.pk),
        cards_reviewed=session.cards_reviewed,
    )
    return card, session


def end(user, session_id) -> ReviewSession:
    require_user(user)
    session = repos.end_session(repos.get_review_session(session_id, user))
    logger.info(
        "review_session_ended",
        session_id=str(session.pk),
        cards_reviewed=session.cards_reviewed,
        duration_seconds=session.duration_seconds,
    )
    return session
