import math
from typing import NamedTuple

from .enums import GRADUATED_STATUSES, LearningStatus, Rating
from .errors import InvalidArgumentError
from ..config import (
    AGAIN_EASE_PENALTY,
    EASY_EASE_BONUS,
    EASY_INTERVAL_FACTOR,
    FIRST_INTERVALS,
    GRADUATION_THRESHOLD,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_FACTOR,
    MIN_EASE_FACTOR,
)


class ScheduleResult(NamedTuple):
    ease_factor: float
    repetition_count: int
    interval: int


class LifecycleResult(NamedTuple):
    status: LearningStatus
    correct_count: int
    graduated: bool


def parse_rating(rating) -> Rating:
    try:
        return Rating(rating)
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid rating {rating!r}, must be one of: again, hard, good, easy"
        ) from None


def _grown_interval(repetition_count: int, interval: int, ease_factor: float) -> int:
    if repetition_count in FIRST_INTERVALS:
        return FIRST_INTERVALS[repetition_count]
    return math.ceil(interval * ease_factor)


def schedule(rating, ease_factor: float, repetition_count: int, interval: int) -> ScheduleResult:
    """
    SM-2 variant: compute the next ease factor, repetition count and interval (days).

    ``easy`` only applies its 1.3 boost once the card is past its two fixed
    first intervals. The caller turns the interval into a date.
    """
    rating = parse_rating(rating)

    if rating == Rating.AGAIN:
        return ScheduleResult(max(MIN_EASE_FACTOR, ease_factor - AGAIN_EASE_PENALTY), 0, 1)

    if rating == Rating.HARD:
        new_interval = math.ceil(interval * HARD_INTERVAL_FACTOR) or 1
        return ScheduleResult(
            max(MIN_EASE_FACTOR, ease_factor - HARD_EASE_PENALTY), repetition_count, new_interval
        )

    new_interval = _grown_interval(repetition_count, interval, ease_factor)
    if rating == Rating.GOOD:
        return ScheduleResult(ease_factor, repetition_count + 1, new_interval)

    if repetition_count not in FIRST_INTERVALS:
        new_interval = math.ceil(new_interval * EASY_INTERVAL_FACTOR)
    return ScheduleResult(ease_factor + EASY_EASE_BONUS, repetition_count + 1, new_interval)


def advance_lifecycle(
    status,
    correct_count: int,
    rating,
    was_marked_correct: bool,
    threshold: int = GRADUATION_THRESHOLD,
) -> LifecycleResult:
    """Move an onboarding card along new -> learning -> review; graduated cards pass through."""
    status = LearningStatus(status)
    rating = parse_rating(rating)

    if status in GRADUATED_STATUSES:
        return LifecycleResult(status, correct_count, False)

    # A lapse always restarts onboarding progress
    if rating == Rating.AGAIN:
        correct_count = 0
    elif was_marked_correct:
        correct_count += 1

    if correct_count >= threshold:
        return LifecycleResult(LearningStatus.REVIEW, correct_count, True)
    return LifecycleResult(LearningStatus.LEARNING, correct_count, False)
