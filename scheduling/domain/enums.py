from enum import Enum


class Rating(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


class LearningStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    LEARNED = "learned"  # legacy alias of REVIEW, still accepted on read


RATING_LABELS = {
    Rating.AGAIN: "Again",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}

ONBOARDING_STATUSES = (LearningStatus.NEW, LearningStatus.LEARNING)
GRADUATED_STATUSES = (LearningStatus.REVIEW, LearningStatus.LEARNED)
