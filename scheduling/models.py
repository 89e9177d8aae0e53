# Django discovers models through ``<app>.models``
from .data.models import (  # noqa: F401
    Card,
    DailyLearningSession,
    Deck,
    LearningLesson,
    ReviewRecord,
    ReviewSession,
)
