# progress/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import Q

from courses.models import Lesson, Exercise

class StudentProgress(models.Model):
    """A student's completion of one lesson or one exercise, never both."""
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='progress')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, null=True, blank=True, related_name='progress')
    exercise = models.ForeignKey(Exercise, on_delete=models.CASCADE, null=True, blank=True, related_name='progress')

    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    # Percentage; null for exercises graded without a score
    score = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(100)])

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(lesson__isnull=False, exercise__isnull=True)
                    | Q(lesson__isnull=True, exercise__isnull=False)
                ),
                name='progress_lesson_xor_exercise',
            ),
            models.UniqueConstraint(fields=['user', 'lesson'], condition=Q(lesson__isnull=False), name='unique_lesson_progress'),
            models.UniqueConstraint(fields=['user', 'exercise'], condition=Q(exercise__isnull=False), name='unique_exercise_progress'),
        ]

    def __str__(self):
        target = self.lesson or self.exercise
        return f"{self.user} - {target} - {'done' if self.completed else 'pending'}"

class StudentXP(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='xp')
    total_xp = models.PositiveIntegerField(default=0)
    level = models.PositiveIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user} - {self.total_xp} XP (level {self.level})"
