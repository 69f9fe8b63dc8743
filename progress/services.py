# progress/services.py
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from courses.exercise_types import MultipleChoiceExercise, parse_exercise
from .models import StudentProgress, StudentXP

logger = logging.getLogger(__name__)


class ProgressError(serializers.ValidationError):
    pass


def award_xp(user, amount):
    with transaction.atomic():
        xp, _ = StudentXP.objects.select_for_update().get_or_create(user=user)
        xp.total_xp += amount
        xp.level = xp.total_xp // settings.XP_PER_LEVEL + 1
        xp.save()
    return xp


def _mark_completed(progress, score=None, scored=False):
    """Complete a progress row; returns True the first time it becomes complete."""
    first_time = not progress.completed
    progress.completed = True
    if first_time:
        progress.completed_at = timezone.now()
    if scored:
        progress.score = score
    progress.save()
    return first_time


def complete_lesson(user, lesson):
    """
    Mark a lesson complete for ``user``.

    Every exercise of the lesson has to be completed first. XP is awarded
    only the first time. Returns ``(progress, xp_earned)``.
    """
    exercise_ids = list(lesson.exercises.values_list('id', flat=True))
    done = StudentProgress.objects.filter(user=user, exercise_id__in=exercise_ids, completed=True).count()
    if done < len(exercise_ids):
        raise ProgressError("Complete all exercises before finishing the lesson.")

    with transaction.atomic():
        progress, _ = StudentProgress.objects.select_for_update().get_or_create(user=user, lesson=lesson)
        first_time = _mark_completed(progress)

    xp_earned = lesson.xp_reward if first_time else 0
    if xp_earned:
        award_xp(user, xp_earned)
    logger.info("User %s completed lesson %s (+%s XP)", user.pk, lesson.pk, xp_earned)
    return progress, xp_earned


def submit_exercise(user, exercise, answers):
    """
    Grade a submission and record it.

    Multiple choice exercises get a 0-100 score; code exercises are recorded
    as completed without a score. Returns ``(progress, xp_earned)``.
    """
    payload = parse_exercise(exercise)
    if isinstance(payload, MultipleChoiceExercise):
        score, scored = payload.grade(answers), True
    else:
        score, scored = None, False

    with transaction.atomic():
        progress, _ = StudentProgress.objects.select_for_update().get_or_create(user=user, exercise=exercise)
        first_time = _mark_completed(progress, score=score, scored=scored)

    xp_earned = exercise.xp_reward if first_time else 0
    if xp_earned:
        award_xp(user, xp_earned)
    logger.info("User %s submitted exercise %s score=%s (+%s XP)", user.pk, exercise.pk, score, xp_earned)
    return progress, xp_earned
