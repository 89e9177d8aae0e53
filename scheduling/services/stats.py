"""
Read-only dashboard statistics derived from cards and review history.

A failing query never reaches the caller: the dashboard gets zeroed
defaults instead.
"""
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

import structlog
from django.db import DatabaseError

from ..config import STUDY_WINDOW_DAYS
from ..data.models import Card, DailyLearningSession, ReviewRecord
from ..domain.enums import GRADUATED_STATUSES, LearningStatus
from ..utils.time import days_from, local_date, today
from .reviews import require_user

logger = structlog.get_logger()

GRADUATED_VALUES = [s.value for s in GRADUATED_STATUSES]


@dataclass
class DailyStats:
    cards_to_learn: int = 0
    cards_in_progress: int = 0
    cards_learned_total: int = 0
    cards_learned_today: int = 0
    cards_due_today: int = 0
    study_days_last_month: int = 0
    last_study_date: Optional[date] = None
    current_streak: int = 0
    active_session_id: Optional[str] = None

    def as_dict(self):
        return asdict(self)


def study_dates(user):
    """Calendar days with at least one answered card or started daily session."""
    reviewed = ReviewRecord.objects.filter(user=user).datetimes("reviewed_at", "day")
    started = DailyLearningSession.objects.filter(user=user).datetimes("started_at", "day")
    return {local_date(dt) for dt in reviewed} | {local_date(dt) for dt in started}


def current_streak(active_days, as_of):
    """Consecutive active days ending today; a day without activity breaks it."""
    streak = 0
    day = as_of
    while day in active_days:
        streak += 1
        day = days_from(day, -1)
    return streak


def _collect(user, as_of):
    cards = Card.objects.filter(deck__user=user)
    active_days = study_dates(user)
    window_start = days_from(as_of, -(STUDY_WINDOW_DAYS - 1))
    active_session = DailyLearningSession.objects.filter(
        user=user, study_date=as_of, ended_at__isnull=True
    ).first()

    return DailyStats(
        cards_to_learn=cards.filter(learning_status=LearningStatus.NEW.value).count(),
        cards_in_progress=cards.filter(learning_status=LearningStatus.LEARNING.value).count(),
        cards_learned_total=cards.filter(learning_status__in=GRADUATED_VALUES).count(),
        cards_learned_today=cards.filter(graduated_at__date=as_of).count(),
        cards_due_today=cards.exclude(learning_status=LearningStatus.NEW.value)
        .filter(next_review_date__lte=as_of)
        .count(),
        study_days_last_month=sum(1 for d in active_days if window_start <= d <= as_of),
        last_study_date=max(active_days) if active_days else None,
        current_streak=current_streak(active_days, as_of),
        active_session_id=str(active_session.pk) if active_session else None,
    )


def get_daily_stats(user) -> DailyStats:
    require_user(user)
    try:
        stats = _collect(user, today())
    except DatabaseError:
        logger.exception("daily_stats_unavailable", user_id=str(user.pk))
        return DailyStats()

    logger.info(
        "daily_stats_computed",
        user_id=str(user.pk),
        cards_due_today=stats.cards_due_today,
        current_streak=stats.current_streak,
    )
    return stats
