from django.conf import settings

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
AGAIN_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15
HARD_INTERVAL_FACTOR = 1.2
EASY_INTERVAL_FACTOR = 1.3
FIRST_INTERVALS = {
    0: 1,  # days after the first successful review
    1: 6,  # days after the second
}

GRADUATION_THRESHOLD = 3
CONFLICT_RETRY_ATTEMPTS = 3

DEFAULT_DAILY_NEW_CARDS_LIMIT = 20
MIN_DAILY_NEW_CARDS_LIMIT = 1
MAX_DAILY_NEW_CARDS_LIMIT = 100

STUDY_WINDOW_DAYS = 30


def graduation_threshold() -> int:
    return getattr(settings, "SCHEDULING_GRADUATION_THRESHOLD", GRADUATION_THRESHOLD)


def conflict_retry_attempts() -> int:
    # Always at least one attempt
    return max(1, getattr(settings, "SCHEDULING_CONFLICT_RETRY_ATTEMPTS", CONFLICT_RETRY_ATTEMPTS))


def default_daily_new_cards_limit() -> int:
    return getattr(
        settings, "SCHEDULING_DEFAULT_DAILY_NEW_CARDS_LIMIT", DEFAULT_DAILY_NEW_CARDS_LIMIT
    )
