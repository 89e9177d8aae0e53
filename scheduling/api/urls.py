from django.urls import path

from .views import (
    DailySessionDetailView,
    DailySessionListView,
    DailySessionReviewView,
    DailyStatsView,
    LessonDetailView,
    LessonListView,
    ReviewSessionDetailView,
    ReviewSessionListView,
    ReviewSessionReviewView,
)

urlpatterns = [
    path("review-sessions", ReviewSessionListView.as_view(), name="review-sessions"),
    path("review-sessions/<uuid:session_id>", ReviewSessionDetailView.as_view(), name="review-session"),
    path(
        "review-sessions/<uuid:session_id>/review",
        ReviewSessionReviewView.as_view(),
        name="review-session-review",
    ),
    path("daily-learning-sessions", DailySessionListView.as_view(), name="daily-sessions"),
    path(
        "daily-learning-sessions/<uuid:session_id>",
        DailySessionDetailView.as_view(),
        name="daily-session",
    ),
    path(
        "daily-learning-sessions/<uuid:session_id>/review",
        DailySessionReviewView.as_view(),
        name="daily-session-review",
    ),
    path("daily-stats", DailyStatsView.as_view(), name="daily-stats"),
    path("learning-lessons", LessonListView.as_view(), name="lessons"),
    path("learning-lessons/<uuid:lesson_id>", LessonDetailView.as_view(), name="lesson"),
]
