import hashlib
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from ..config import DEFAULT_DAILY_NEW_CARDS_LIMIT, INITIAL_EASE_FACTOR, MIN_EASE_FACTOR
from ..domain.enums import LearningStatus, Rating
from ..utils.time import today

LEARNING_STATUS_CHOICES = [(s.value, s.name.title()) for s in LearningStatus]
RATING_CHOICES = [(r.value, r.name.title()) for r in Rating]


def deck_key(deck_ids):
    """Canonical scope key for a set of deck ids: sha256 of the sorted ids."""
    joined = ",".join(sorted({str(d) for d in deck_ids}))
    return hashlib.sha256(joined.encode()).hexdigest()


class Deck(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="decks")
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.name


class Card(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE, related_name="cards")
    question = models.TextField()
    answer = models.TextField()

    ease_factor = models.FloatField(default=INITIAL_EASE_FACTOR)
    interval = models.PositiveIntegerField(default=0)  # days
    repetition_count = models.PositiveIntegerField(default=0)
    next_review_date = models.DateField(default=today)
    last_reviewed_at = models.DateTimeField(null=True, blank=True)

    learning_status = models.CharField(
        max_length=16, choices=LEARNING_STATUS_CHOICES, default=LearningStatus.NEW.value
    )
    correct_count = models.PositiveIntegerField(default=0)
    graduated_at = models.DateTimeField(null=True, blank=True)

    # Optimistic-concurrency token, bumped by every scheduling write
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(ease_factor__gte=MIN_EASE_FACTOR), name="card_ease_factor_floor"
            ),
        ]
        indexes = [
            models.Index(fields=["deck", "next_review_date"], name="card_deck_due_idx"),
            models.Index(
                fields=["deck", "learning_status", "created_at"], name="card_deck_status_created_idx"
            ),
        ]


class LearningLesson(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="learning_lessons"
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    deck_ids = models.JSONField(default=list)
    daily_new_cards_limit = models.PositiveSmallIntegerField(default=DEFAULT_DAILY_NEW_CARDS_LIMIT)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]


class ReviewSession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="review_sessions"
    )
    deck_ids = models.JSONField(default=list)
    deck_key = models.CharField(max_length=64)
    started_at = models.DateTimeField(default=timezone.now)
    ended_at = models.DateTimeField(null=True, blank=True)
    cards_reviewed = models.PositiveIntegerField(default=0)
    total_cards = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "deck_key"],
                condition=Q(ended_at__isnull=True),
                name="one_active_review_session_per_scope",
            ),
        ]

    @property
    def is_active(self):
        return self.ended_at is None

    @property
    def duration_seconds(self):
        end = self.ended_at or timezone.now()
        return int((end - self.started_at).total_seconds())

    @property
    def completion_percentage(self):
        if self.total_cards == 0:
            return 0
        return round(self.cards_reviewed / self.total_cards * 100)


class DailyLearningSession(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="daily_sessions"
    )
    lesson = models.ForeignKey(
        LearningLesson, null=True, blank=True, on_delete=models.SET_NULL, related_name="sessions"
    )
    deck_ids = models.JSONField(default=list)
    daily_new_cards_limit = models.PositiveSmallIntegerField(default=DEFAULT_DAILY_NEW_CARDS_LIMIT)
    study_date = models.DateField(default=today)
    started_at = models.DateTimeField(default=timezone.now)
    ended_at = models.DateTimeField(null=True, blank=True)
    cards_studied = models.PositiveIntegerField(default=0)
    cards_learned = models.PositiveIntegerField(default=0)
    new_cards_today = models.PositiveIntegerField(default=0)
    review_cards_today = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "study_date"],
                condition=Q(ended_at__isnull=True),
                name="one_active_daily_session_per_day",
            ),
        ]

    @property
    def is_active(self):
        return self.ended_at is None

    @property
    def duration_seconds(self):
        end = self.ended_at or timezone.now()
        return int((end - self.started_at).total_seconds())


class ReviewRecord(models.Model):
    """Append-only history row, one per answered card."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="review_records"
    )
    card = models.ForeignKey(Card, on_delete=models.CASCADE, related_name="review_records")
    review_session = models.ForeignKey(
        ReviewSession, null=True, blank=True, on_delete=models.CASCADE, related_name="records"
    )
    daily_session = models.ForeignKey(
        DailyLearningSession, null=True, blank=True, on_delete=models.CASCADE, related_name="records"
    )
    rating = models.CharField(max_length=8, choices=RATING_CHOICES)
    was_new_card = models.BooleanField(default=False)
    previous_status = models.CharField(max_length=16, choices=LEARNING_STATUS_CHOICES)
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(review_session__isnull=False, daily_session__isnull=True)
                    | Q(review_session__isnull=True, daily_session__isnull=False)
                ),
                name="review_record_single_session",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "reviewed_at"], name="record_user_reviewed_idx"),
        ]
