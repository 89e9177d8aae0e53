import uuid

import structlog
from rest_framework import status, views
from rest_framework.response import Response

from ..domain.enums import RATING_LABELS, Rating
from ..services import daily_sessions, lessons, review_sessions, stats
from .serializers import (
    CardSerializer,
    DailyReviewInSerializer,
    DailySessionSerializer,
    DailySessionStartSerializer,
    DeckSerializer,
    LessonInSerializer,
    LessonSerializer,
    ReviewInSerializer,
    ReviewSessionSerializer,
    ReviewSessionStartSerializer,
    SessionActionSerializer,
)

base_logger = structlog.get_logger()


def _request_logger(request):
    return base_logger.bind(request_id=str(uuid.uuid4()), user_id=str(request.user.pk))


def _started_status(is_resumed):
    return status.HTTP_200_OK if is_resumed else status.HTTP_201_CREATED


class ReviewSessionListView(views.APIView):
    def post(self, request):
        logger = _request_logger(request)
        s = ReviewSessionStartSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        started = review_sessions.start_or_resume(request.user, s.validated_data["deck_ids"])
        status_code = _started_status(started.is_resumed)
        logger.info(
            "review_session_api_response",
            session_id=str(started.session.pk),
            due_cards=len(started.cards),
            resumed=started.is_resumed,
            status=status_code,
        )
        return Response(
            {
                "session": ReviewSessionSerializer(started.session).data,
                "due_cards": CardSerializer(started.cards, many=True).data,
                "is_resumed": started.is_resumed,
            },
            status=status_code,
        )


class ReviewSessionDetailView(views.APIView):
    def get(self, request, session_id):
        session = review_sessions.get(request.user, session_id)
        return Response({"session": ReviewSessionSerializer(session).data})

    def patch(self, request, session_id):
        logger = _request_logger(request)
        SessionActionSerializer(data=request.data).is_valid(raise_exception=True)

        session = review_sessions.end(request.user, session_id)
        logger.info("review_session_end_api_response", session_id=str(session.pk))
        return Response(ReviewSessionSerializer(session).data)


class ReviewSessionReviewView(views.APIView):
    def post(self, request, session_id):
        logger = _request_logger(request)
        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        card, session = review_sessions.submit_review(
            request.user,
            session_id,
            data["card_id"],
            data["rating"],
            expected_version=data.get("expected_version"),
        )
        logger.info(
            "review_api_response",
            session_id=str(session.pk),
            card_id=str(card.pk),
            rating=data["rating"],
            interval_days=card.interval,
            next_review_date=card.next_review_date.isoformat(),
        )
        return Response(
            {
                "flashcard": CardSerializer(card).data,
                "session": ReviewSessionSerializer(session).data,
                "rating_label": RATING_LABELS[Rating(data["rating"])],
            }
        )


class DailySessionListView(views.APIView):
    def post(self, request):
        logger = _request_logger(request)
        s = DailySessionStartSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        started = daily_sessions.start_or_resume(
            request.user,
            deck_ids=data.get("deck_ids"),
            daily_new_cards_limit=data.get("daily_new_cards_limit"),
            lesson_id=data.get("lesson_id"),
        )
        status_code = _started_status(started.is_resumed)
        logger.info(
            "daily_session_api_response",
            session_id=str(started.session.pk),
            cards=len(started.cards),
            resumed=started.is_resumed,
            status=status_code,
        )
        return Response(
            {
                "session": DailySessionSerializer(started.session).data,
                "cards": CardSerializer(started.cards, many=True).data,
                "decks": DeckSerializer(started.decks, many=True).data,
                "is_resumed": started.is_resumed,
            },
            status=status_code,
        )


class DailySessionDetailView(views.APIView):
    def get(self, request, session_id):
        session = daily_sessions.get(request.user, session_id)
        return Response({"session": DailySessionSerializer(session).data})

    def patch(self, request, session_id):
        logger = _request_logger(request)
        SessionActionSerializer(data=request.data).is_valid(raise_exception=True)

        session = daily_sessions.end(request.user, session_id)
        logger.info("daily_session_end_api_response", session_id=str(session.pk))
        return Response(DailySessionSerializer(session).data)


class DailySessionReviewView(views.APIView):
    def post(self, request, session_id):
        logger = _request_logger(request)
        s = DailyReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        card, session = daily_sessions.submit_review(
            request.user,
            session_id,
            data["card_id"],
            data["rating"],
            was_marked_correct=data["was_correct"],
            expected_version=data.get("expected_version"),
        )
        logger.info(
            "daily_review_api_response",
            session_id=str(session.pk),
            card_id=str(card.pk),
            rating=data["rating"],
            learning_status=card.learning_status,
        )
        return Response(
            {
                "flashcard": CardSerializer(card).data,
                "session": DailySessionSerializer(session).data,
                "rating_label": RATING_LABELS[Rating(data["rating"])],
            }
        )


class DailyStatsView(views.APIView):
    def get(self, request):
        return Response(stats.get_daily_stats(request.user).as_dict())


class LessonListView(views.APIView):
    def get(self, request):
        return Response(LessonSerializer(lessons.list_lessons(request.user), many=True).data)

    def post(self, request):
        s = LessonInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        lesson = lessons.create_lesson(request.user, **s.validated_data)
        return Response(LessonSerializer(lesson).data, status=status.HTTP_201_CREATED)


class LessonDetailView(views.APIView):
    def get(self, request, lesson_id):
        return Response(LessonSerializer(lessons.get_lesson(request.user, lesson_id)).data)

    def patch(self, request, lesson_id):
        s = LessonInSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        lesson = lessons.update_lesson(request.user, lesson_id, **s.validated_data)
        return Response(LessonSerializer(lesson).data)

    def delete(self, request, lesson_id):
        lessons.delete_lesson(request.user, lesson_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
