import itertools
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from scheduling.data.models import Card, Deck
from scheduling.utils.time import days_from, today

_seq = itertools.count()


@pytest.fixture
def user(db):
    return User.objects.create_user(username="learner")


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username="someone-else")


@pytest.fixture
def deck(user):
    return Deck.objects.create(user=user, name="Dutch verbs")


@pytest.fixture
def second_deck(user):
    return Deck.objects.create(user=user, name="Dutch nouns")


@pytest.fixture
def make_card():
    """Create a card; ``due_in`` is days from today (negative = overdue)."""

    def _make(deck, due_in=0, status="new", **fields):
        n = next(_seq)
        fields.setdefault("created_at", timezone.now() + timedelta(seconds=n))
        return Card.objects.create(
            deck=deck,
            question=f"Question {n}",
            answer=f"Answer {n}",
            next_review_date=days_from(today(), due_in),
            learning_status=status,
            **fields,
        )

    return _make


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.credentials(HTTP_X_USER_NAME=user.username)
    return client
