import logging
import uuid

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from scheduling.utils.time import days_from, today

logger = logging.getLogger(__name__)

# Helpers

def start_review_session(client, deck_ids):
    resp = client.post(
        reverse("review-sessions"), {"deck_ids": [str(d) for d in deck_ids]}, format="json"
    )
    data = resp.json()
    logger.info(
        "POST /review-sessions decks=%s → status=%s due_cards=%s",
        len(deck_ids),
        resp.status_code,
        len(data.get("due_cards", [])),
    )
    return resp


def submit(client, url_name, session_id, card_id, rating, **extra):
    url = reverse(url_name, kwargs={"session_id": str(session_id)})
    payload = {"card_id": str(card_id), "rating": rating, **extra}
    resp = client.post(url, payload, format="json")
    data = resp.json()
    logger.info(
        "POST %s rating=%s → status=%s interval=%s",
        url,
        rating,
        resp.status_code,
        data.get("flashcard", {}).get("interval"),
    )
    return resp


# Review sessions

@pytest.mark.django_db
def test_start_then_resume_review_session(api_client, deck, make_card):
    """First start creates (201), a second start for the same decks resumes (200)."""
    card = make_card(deck, due_in=-1, status="review")

    first = start_review_session(api_client, [deck.id])
    assert first.status_code == 201
    body = first.json()
    assert body["is_resumed"] is False
    assert [c["id"] for c in body["due_cards"]] == [str(card.id)]
    assert body["session"]["total_cards"] == 1
    assert body["session"]["ended_at"] is None

    second = start_review_session(api_client, [deck.id])
    assert second.status_code == 200
    assert second.json()["is_resumed"] is True
    assert second.json()["session"]["id"] == body["session"]["id"]
    logger.info("✓ Passed: review session created then resumed")


@pytest.mark.django_db
def test_review_reschedules_card(api_client, deck, make_card):
    card = make_card(deck, due_in=0, status="review", repetition_count=2, interval=6)
    session_id = start_review_session(api_client, [deck.id]).json()["session"]["id"]

    resp = submit(api_client, "review-session-review", session_id, card.id, "good")

    assert resp.status_code == 200
    data = resp.json()
    assert data["flashcard"]["interval"] == 15
    assert data["flashcard"]["repetition_count"] == 3
    assert data["flashcard"]["next_review_date"] == days_from(today(), 15).isoformat()
    assert data["flashcard"]["version"] == 1
    assert data["rating_label"] == "Good"
    assert data["session"]["cards_reviewed"] == 1
    assert data["session"]["completion_percentage"] == 100


@pytest.mark.django_db
def test_stale_expected_version_is_conflict(api_client, deck, make_card):
    card = make_card(deck)
    session_id = start_review_session(api_client, [deck.id]).json()["session"]["id"]

    ok = submit(api_client, "review-session-review", session_id, card.id, "good", expected_version=0)
    clash = submit(api_client, "review-session-review", session_id, card.id, "good", expected_version=0)

    assert ok.status_code == 200
    assert clash.status_code == 409
    assert clash.json()["code"] == "CONFLICT"
    assert clash.json()["retryable"] is True
    logger.info("✓ Passed: duplicate submit from the same state rejected")


@pytest.mark.django_db
def test_end_session_with_patch(api_client, deck):
    session_id = start_review_session(api_client, [deck.id]).json()["session"]["id"]
    url = reverse("review-session", kwargs={"session_id": session_id})

    resp = api_client.patch(url, {"action": "end"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["ended_at"] is not None

    again = api_client.patch(url, {"action": "end"}, format="json")
    assert again.status_code == 409
    assert again.json()["code"] == "INVALID_STATE"

    bad_action = api_client.patch(url, {"action": "pause"}, format="json")
    assert bad_action.status_code == 400

    detail = api_client.get(url)
    assert detail.status_code == 200
    assert detail.json()["session"]["duration_seconds"] >= 0


@pytest.mark.django_db
def test_bad_input_is_bad_request(api_client, deck, make_card):
    card = make_card(deck)
    assert start_review_session(api_client, []).status_code == 400

    session_id = start_review_session(api_client, [deck.id]).json()["session"]["id"]
    resp = submit(api_client, "review-session-review", session_id, card.id, "perfect")
    assert resp.status_code == 400
    card.refresh_from_db()
    assert card.version == 0


@pytest.mark.django_db
def test_foreign_and_missing_resources_are_not_found(api_client, other_user, deck, make_card):
    card = make_card(deck)
    session_id = start_review_session(api_client, [deck.id]).json()["session"]["id"]

    intruder = APIClient()
    intruder.credentials(HTTP_X_USER_NAME=other_user.username)

    assert start_review_session(intruder, [deck.id]).status_code == 404
    resp = submit(intruder, "review-session-review", session_id, card.id, "good")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"

    missing = reverse("review-session", kwargs={"session_id": str(uuid.uuid4())})
    assert api_client.get(missing).status_code == 404


@pytest.mark.django_db
def test_requests_without_user_are_unauthorized(deck):
    client = APIClient()
    assert start_review_session(client, [deck.id]).status_code == 401
    assert client.get(reverse("daily-stats")).status_code == 401


# Daily sessions

@pytest.mark.django_db
def test_daily_session_flow(api_client, deck, make_card):
    """Start, answer a new card correctly, resume, end."""
    new_cards = [make_card(deck) for _ in range(4)]
    url = reverse("daily-sessions")

    resp = api_client.post(url, {"deck_ids": [str(deck.id)], "daily_new_cards_limit": 2}, format="json")
    assert resp.status_code == 201
    body = resp.json()
    assert [c["id"] for c in body["cards"]] == [str(c.id) for c in new_cards[:2]]
    assert [d["id"] for d in body["decks"]] == [str(deck.id)]
    session_id = body["session"]["id"]

    review = submit(
        api_client, "daily-session-review", session_id, new_cards[0].id, "easy", was_correct=True
    )
    assert review.status_code == 200
    assert review.json()["flashcard"]["learning_status"] == "learning"
    assert review.json()["flashcard"]["correct_count"] == 1
    assert review.json()["session"]["new_cards_today"] == 1

    resumed = api_client.post(url, {"deck_ids": [str(deck.id)]}, format="json")
    assert resumed.status_code == 200
    assert resumed.json()["session"]["id"] == session_id

    ended = api_client.patch(
        reverse("daily-session", kwargs={"session_id": session_id}), {"action": "end"}, format="json"
    )
    assert ended.status_code == 200
    assert ended.json()["cards_studied"] == 1
    logger.info("✓ Passed: daily session start/review/resume/end")


@pytest.mark.django_db
@pytest.mark.parametrize("limit", [0, 101])
def test_daily_limit_out_of_range(api_client, deck, limit):
    resp = api_client.post(
        reverse("daily-sessions"),
        {"deck_ids": [str(deck.id)], "daily_new_cards_limit": limit},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


# Stats and lessons

@pytest.mark.django_db
def test_daily_stats(api_client, deck, make_card):
    make_card(deck)
    make_card(deck, due_in=-1, status="review")

    resp = api_client.get(reverse("daily-stats"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["cards_to_learn"] == 1
    assert data["cards_due_today"] == 1
    assert data["current_streak"] == 0
    assert data["last_study_date"] is None


@pytest.mark.django_db
def test_lesson_crud(api_client, deck, second_deck):
    resp = api_client.post(
        reverse("lessons"),
        {"name": "Verbs", "deck_ids": [str(deck.id)], "daily_new_cards_limit": 8},
        format="json",
    )
    assert resp.status_code == 201
    lesson_id = resp.json()["id"]
    url = reverse("lesson", kwargs={"lesson_id": lesson_id})

    patched = api_client.patch(url, {"deck_ids": [str(second_deck.id)]}, format="json")
    assert patched.status_code == 200
    assert patched.json()["name"] == "Verbs"
    assert patched.json()["deck_ids"] == [str(second_deck.id)]

    assert [l["id"] for l in api_client.get(reverse("lessons")).json()] == [lesson_id]

    blank = api_client.post(reverse("lessons"), {"name": " ", "deck_ids": [str(deck.id)]}, format="json")
    assert blank.status_code == 400

    assert api_client.delete(url).status_code == 204
    assert api_client.get(url).status_code == 404
