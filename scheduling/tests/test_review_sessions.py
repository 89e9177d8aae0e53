import logging
import uuid

import pytest

from scheduling.data import repos
from scheduling.data.models import Deck, ReviewRecord, ReviewSession
from scheduling.domain.errors import (
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
)
from scheduling.services import review_sessions
from scheduling.utils.time import days_from, today

logger = logging.getLogger(__name__)


@pytest.mark.django_db
def test_due_queue_is_oldest_overdue_first(user, deck, second_deck, make_card):
    """Due cards across the deck set, ordered by due date; future cards excluded."""
    old = make_card(deck, due_in=-5, status="review")
    fresh = make_card(second_deck, due_in=0)
    middle = make_card(deck, due_in=-2, status="learning")
    make_card(deck, due_in=3, status="review")

    started = review_sessions.start_or_resume(user, [deck.id, second_deck.id])

    assert [c.id for c in started.cards] == [old.id, middle.id, fresh.id]
    assert started.is_resumed is False
    assert started.session.cards_reviewed == 0
    assert started.session.total_cards == 3


@pytest.mark.django_db
def test_resume_returns_same_session_and_drops_rescheduled_cards(user, deck, make_card):
    first = make_card(deck, due_in=-1, status="review", repetition_count=2, interval=6)
    second = make_card(deck, due_in=-1, status="review", repetition_count=2, interval=6)

    started = review_sessions.start_or_resume(user, [deck.id])
    review_sessions.submit_review(user, started.session.id, first.id, "good")

    resumed = review_sessions.start_or_resume(user, [str(deck.id)])
    assert resumed.is_resumed is True
    assert resumed.session.id == started.session.id
    assert resumed.session.cards_reviewed == 1
    assert [c.id for c in resumed.cards] == [second.id]
    logger.info("✓ Passed: resume recomputed the due queue")


@pytest.mark.django_db
def test_deck_order_does_not_change_scope(user, deck, second_deck):
    a = review_sessions.start_or_resume(user, [deck.id, second_deck.id])
    b = review_sessions.start_or_resume(user, [second_deck.id, deck.id, deck.id])
    assert a.session.id == b.session.id
    assert ReviewSession.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_empty_deck_set_gives_empty_queue(user, deck, make_card):
    make_card(deck, due_in=10, status="review")
    started = review_sessions.start_or_resume(user, [deck.id])
    assert started.cards == []


@pytest.mark.django_db
def test_submit_review_schedules_card_and_records_history(user, deck, make_card):
    card = make_card(deck, due_in=0)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    updated, session = review_sessions.submit_review(user, session.id, card.id, "good")

    assert (updated.repetition_count, updated.interval) == (1, 1)
    assert updated.next_review_date == days_from(today(), 1)
    assert updated.learning_status == "learning"
    assert updated.correct_count == 0
    assert updated.version == 1
    assert updated.last_reviewed_at is not None
    assert session.cards_reviewed == 1

    record = ReviewRecord.objects.get(card=card)
    assert record.review_session_id == session.id
    assert record.rating == "good"
    assert record.was_new_card is True
    assert record.previous_status == "new"


@pytest.mark.django_db
def test_card_outside_session_scope_is_invalid_state(user, deck, second_deck, make_card):
    outside = make_card(second_deck)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    with pytest.raises(InvalidStateError):
        review_sessions.submit_review(user, session.id, outside.id, "good")
    assert ReviewRecord.objects.count() == 0


@pytest.mark.django_db
def test_foreign_or_missing_resources_are_not_found(user, other_user, deck, make_card):
    card = make_card(deck)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    with pytest.raises(NotFoundError):
        review_sessions.submit_review(other_user, session.id, card.id, "good")
    with pytest.raises(NotFoundError):
        review_sessions.submit_review(user, session.id, uuid.uuid4(), "good")
    with pytest.raises(NotFoundError):
        review_sessions.start_or_resume(other_user, [deck.id])


@pytest.mark.django_db
def test_invalid_input_rejected_before_mutation(user, deck, make_card):
    card = make_card(deck)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    with pytest.raises(InvalidArgumentError):
        review_sessions.submit_review(user, session.id, card.id, "perfect")
    with pytest.raises(InvalidArgumentError):
        review_sessions.start_or_resume(user, [])
    with pytest.raises(InvalidArgumentError):
        review_sessions.start_or_resume(user, ["not-a-deck"])

    card.refresh_from_db()
    assert card.version == 0


@pytest.mark.django_db
def test_anonymous_caller_is_unauthorized(deck):
    with pytest.raises(UnauthorizedError):
        review_sessions.start_or_resume(None, [deck.id])


@pytest.mark.django_db
def test_end_session_then_end_again_is_invalid_state(user, deck, make_card):
    card = make_card(deck)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    ended = review_sessions.end(user, session.id)
    assert ended.ended_at is not None
    assert ended.duration_seconds >= 0

    with pytest.raises(InvalidStateError):
        review_sessions.end(user, session.id)
    with pytest.raises(InvalidStateError):
        review_sessions.submit_review(user, session.id, card.id, "good")


@pytest.mark.django_db
def test_new_session_after_end(user, deck):
    first = review_sessions.start_or_resume(user, [deck.id]).session
    review_sessions.end(user, first.id)

    second = review_sessions.start_or_resume(user, [deck.id])
    assert second.is_resumed is False
    assert second.session.id != first.id


@pytest.mark.django_db
def test_racing_create_returns_the_winner(user, deck):
    """A second create for the same scope hits the unique constraint and re-reads."""
    winner, created = repos.create_review_session(user, [deck.id])
    loser, created_again = repos.create_review_session(user, [deck.id])

    assert created is True
    assert created_again is False
    assert loser.id == winner.id


@pytest.mark.django_db
def test_again_in_review_session_resets_onboarding_progress(user, deck, make_card):
    card = make_card(deck, due_in=0, status="learning", correct_count=2, repetition_count=2, interval=6)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    updated, _ = review_sessions.submit_review(user, session.id, card.id, "again")

    assert updated.correct_count == 0
    assert updated.learning_status == "learning"
    assert (updated.repetition_count, updated.interval) == (0, 1)


@pytest.mark.django_db
def test_good_in_review_session_does_not_add_correct_answers(user, deck, make_card):
    card = make_card(deck, due_in=0, status="learning", correct_count=2)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    updated, _ = review_sessions.submit_review(user, session.id, card.id, "good")

    assert updated.correct_count == 2
    assert updated.learning_status == "learning"


@pytest.mark.django_db
def test_zero_retry_setting_still_makes_one_attempt(settings, user, deck, make_card):
    settings.SCHEDULING_CONFLICT_RETRY_ATTEMPTS = 0
    card = make_card(deck)
    session = review_sessions.start_or_resume(user, [deck.id]).session

    updated, session = review_sessions.submit_review(user, session.id, card.id, "good")

    assert updated.version == 1
    assert session.cards_reviewed == 1


@pytest.mark.django_db
def test_large_deck_set_has_a_fixed_size_scope_key(user):
    decks = [Deck.objects.create(user=user, name=f"Deck {n}") for n in range(80)]

    started = review_sessions.start_or_resume(user, [d.id for d in decks])
    resumed = review_sessions.start_or_resume(user, [d.id for d in reversed(decks)])

    assert len(started.session.deck_key) == 64
    assert len(started.session.deck_ids) == 80
    assert resumed.session.id == started.session.id
