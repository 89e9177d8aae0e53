from rest_framework import serializers

from ..data.models import Card, DailyLearningSession, Deck, LearningLesson, ReviewSession
from ..domain.enums import Rating

RATING_VALUES = [r.value for r in Rating]


# Requests

class ReviewSessionStartSerializer(serializers.Serializer):
    deck_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class DailySessionStartSerializer(serializers.Serializer):
    lesson_id = serializers.UUIDField(required=False, allow_null=True)
    deck_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    daily_new_cards_limit = serializers.IntegerField(required=False, allow_null=True)


class ReviewInSerializer(serializers.Serializer):
    card_id = serializers.UUIDField()
    rating = serializers.ChoiceField(choices=RATING_VALUES)
    expected_version = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class DailyReviewInSerializer(ReviewInSerializer):
    was_correct = serializers.BooleanField(required=False, default=False)


class SessionActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["end"])


class LessonInSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    deck_ids = serializers.ListField(child=serializers.UUIDField())
    daily_new_cards_limit = serializers.IntegerField(required=False)


# Responses

class DeckSerializer(serializers.ModelSerializer):
    class Meta:
        model = Deck
        fields = ["id", "name"]


class CardSerializer(serializers.ModelSerializer):
    class Meta:
        model = Card
        fields = [
            "id",
            "deck_id",
            "question",
            "answer",
            "ease_factor",
            "interval",
            "repetition_count",
            "next_review_date",
            "last_reviewed_at",
            "learning_status",
            "correct_count",
            "version",
        ]


class ReviewSessionSerializer(serializers.ModelSerializer):
    duration_seconds = serializers.IntegerField(read_only=True)
    completion_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = ReviewSession
        fields = [
            "id",
            "deck_ids",
            "started_at",
            "ended_at",
            "cards_reviewed",
            "total_cards",
            "duration_seconds",
            "completion_percentage",
        ]


class DailySessionSerializer(serializers.ModelSerializer):
    duration_seconds = serializers.IntegerField(read_only=True)

    class Meta:
        model = DailyLearningSession
        fields = [
            "id",
            "lesson_id",
            "deck_ids",
            "daily_new_cards_limit",
            "started_at",
            "ended_at",
            "cards_studied",
            "cards_learned",
            "new_cards_today",
            "review_cards_today",
            "duration_seconds",
        ]


class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = LearningLesson
        fields = [
            "id",
            "name",
            "description",
            "deck_ids",
            "daily_new_cards_limit",
            "created_at",
            "updated_at",
        ]
