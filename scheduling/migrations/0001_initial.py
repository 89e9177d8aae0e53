import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import scheduling.utils.time


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Deck",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="decks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Card",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("question", models.TextField()),
                ("answer", models.TextField()),
                ("ease_factor", models.FloatField(default=2.5)),
                ("interval", models.PositiveIntegerField(default=0)),
                ("repetition_count", models.PositiveIntegerField(default=0)),
                ("next_review_date", models.DateField(default=scheduling.utils.time.today)),
                ("last_reviewed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "learning_status",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("learning", "Learning"),
                            ("review", "Review"),
                            ("learned", "Learned"),
                        ],
                        default="new",
                        max_length=16,
                    ),
                ),
                ("correct_count", models.PositiveIntegerField(default=0)),
                ("graduated_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "deck",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cards",
                        to="scheduling.deck",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["deck", "next_review_date"], name="card_deck_due_idx"),
                    models.Index(
                        fields=["deck", "learning_status", "created_at"], name="card_deck_status_created_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("ease_factor__gte", 1.3)), name="card_ease_factor_floor"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LearningLesson",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("deck_ids", models.JSONField(default=list)),
                ("daily_new_cards_limit", models.PositiveSmallIntegerField(default=20)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="learning_lessons",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ReviewSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("deck_ids", models.JSONField(default=list)),
                ("deck_key", models.CharField(max_length=64)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("cards_reviewed", models.PositiveIntegerField(default=0)),
                ("total_cards", models.PositiveIntegerField(default=0)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="review_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("ended_at__isnull", True)),
                        fields=("user", "deck_key"),
                        name="one_active_review_session_per_scope",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyLearningSession",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("deck_ids", models.JSONField(default=list)),
                ("daily_new_cards_limit", models.PositiveSmallIntegerField(default=20)),
                ("study_date", models.DateField(default=scheduling.utils.time.today)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
                ("cards_studied", models.PositiveIntegerField(default=0)),
                ("cards_learned", models.PositiveIntegerField(default=0)),
                ("new_cards_today", models.PositiveIntegerField(default=0)),
                ("review_cards_today", models.PositiveIntegerField(default=0)),
                (
                    "lesson",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sessions",
                        to="scheduling.learninglesson",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="daily_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("ended_at__isnull", True)),
                        fields=("user", "study_date"),
                        name="one_active_daily_session_per_day",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReviewRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "rating",
                    models.CharField(
                        choices=[("again", "Again"), ("hard", "Hard"), ("good", "Good"), ("easy", "Easy")],
                        max_length=8,
                    ),
                ),
                ("was_new_card", models.BooleanField(default=False)),
                (
                    "previous_status",
                    models.CharField(
                        choices=[
                            ("new", "New"),
                            ("learning", "Learning"),
                            ("review", "Review"),
                            ("learned", "Learned"),
                        ],
                        max_length=16,
                    ),
                ),
                ("reviewed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "card",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="review_records",
                        to="scheduling.card",
                    ),
                ),
                (
                    "daily_session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="records",
                        to="scheduling.dailylearningsession",
                    ),
                ),
                (
                    "review_session",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="records",
                        to="scheduling.reviewsession",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="review_records",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["user", "reviewed_at"], name="record_user_reviewed_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("daily_session__isnull", True), ("review_session__isnull", False)),
                            models.Q(("daily_session__isnull", False), ("review_session__isnull", True)),
                            _connector="OR",
                        ),
                        name="review_record_single_session",
                    ),
                ],
            },
        ),
    ]
