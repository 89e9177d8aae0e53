"""
Saved deck-group configurations used to start daily learning sessions.
"""
import structlog

from .. import config
from ..data import repos
from ..data.models import LearningLesson
from ..domain.errors import InvalidArgumentError
from .reviews import normalize_deck_ids, require_user, validate_daily_limit

logger = structlog.get_logger()

_UNSET = object()


def _clean_name(name):
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError("Lesson name is required")
    return name.strip()


def _owned_deck_ids(user, deck_ids):
    deck_ids = normalize_deck_ids(deck_ids)
    repos.get_owned_decks(user, deck_ids)
    return [str(d) for d in deck_ids]


def list_lessons(user):
    require_user(user)
    return list(LearningLesson.objects.filter(user=user))


def get_lesson(user, lesson_id):
    require_user(user)
    return repos.get_lesson(lesson_id, user)


def create_lesson(user, name, deck_ids, daily_new_cards_limit=None, description=""):
    require_user(user)
    if daily_new_cards_limit is None:
        daily_new_cards_limit = config.default_daily_new_cards_limit()
    lesson = LearningLesson.objects.create(
        user=user,
        name=_clean_name(name),
        description=description or "",
        deck_ids=_owned_deck_ids(user, deck_ids),
        daily_new_cards_limit=validate_daily_limit(daily_new_cards_limit),
    )
    logger.info("lesson_created", user_id=str(user.pk), lesson_id=str(lesson.pk))
    return lesson


def update_lesson(
    user,
    lesson_id,
    name=_UNSET,
    deck_ids=_UNSET,
    daily_new_cards_limit=_UNSET,
    description=_UNSET,
):
    require_user(user)
    lesson = repos.get_lesson(lesson_id, user)
    if name is not _UNSET:
        lesson.name = _clean_name(name)
    if deck_ids is not _UNSET:
        lesson.deck_ids = _owned_deck_ids(user, deck_ids)
    if daily_new_cards_limit is not _UNSET:
        lesson.daily_new_cards_limit = validate_daily_limit(daily_new_cards_limit)
    if description is not _UNSET:
        lesson.description = description or ""
    lesson.save()
    logger.info("lesson_updated", user_id=str(user.pk), lesson_id=str(lesson.pk))
    return lesson


def delete_lesson(user, lesson_id):
    require_user(user)
    lesson = repos.get_lesson(lesson_id, user)
    lesson.delete()
    logger.info("lesson_deleted", user_id=str(user.pk), lesson_id=str(lesson_id))
