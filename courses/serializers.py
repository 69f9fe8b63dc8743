# courses/serializers.py
import logging

from rest_framework import serializers
from .models import Course, Module, Lesson, Exercise
from .exercise_types import (
    parse_questions, parse_code, parse_exercise, MultipleChoiceExercise, InvalidExercisePayload
)

logger = logging.getLogger(__name__)

# --- Catalogue Serializers ---

class CourseSerializer(serializers.ModelSerializer):
    total_modules = serializers.IntegerField(source='modules.count', read_only=True)

    class Meta:
        model = Course
        fields = ['id', 'title', 'description', 'image_url', 'order_index', 'created_at', 'total_modules']
        read_only_fields = ['created_at']

class ModuleSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source='course.title', read_only=True)
    total_lessons = serializers.IntegerField(source='lessons.count', read_only=True)

    class Meta:
        model = Module
        fields = [
            'id', 'course', 'course_title', 'title', 'description',
            'order_index', 'is_active', 'total_lessons', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = [
            'id', 'course', 'module', 'title', 'content', 'video_url',
            'duration_minutes', 'xp_reward', 'order_index', 'created_at'
        ]
        read_only_fields = ['created_at']

    def validate(self, attrs):
        course = attrs.get('course', getattr(self.instance, 'course', None))
        module = attrs.get('module', getattr(self.instance, 'module', None))
        if module is not None and course is not None and module.course_id != course.id:
            raise serializers.ValidationError({"module": "Module belongs to a different course."})
        return attrs

# --- Exercise Serializers ---

class ExerciseSerializer(serializers.ModelSerializer):
    """Full exercise payload for instructors, validated per exercise type."""

    class Meta:
        model = Exercise
        fields = [
            'id', 'lesson', 'title', 'description', 'type', 'difficulty', 'xp_reward',
            'language', 'starter_code', 'solution_code', 'test_cases', 'created_at'
        ]
        read_only_fields = ['created_at']

    def validate(self, attrs):
        exercise_type = attrs.get('type', getattr(self.instance, 'type', Exercise.ExerciseType.MULTIPLE_CHOICE))

        if exercise_type == Exercise.ExerciseType.MULTIPLE_CHOICE:
            raw = attrs.get('test_cases', getattr(self.instance, 'test_cases', None))
            attrs['test_cases'] = [q.to_dict() for q in parse_questions(raw)]
            attrs['language'] = None
            attrs['starter_code'] = None
            attrs['solution_code'] = None
        else:
            language, solution, starter = parse_code(
                attrs.get('language', getattr(self.instance, 'language', None)),
                attrs.get('solution_code', getattr(self.instance, 'solution_code', None)),
                attrs.get('starter_code', getattr(self.instance, 'starter_code', None)),
            )
            attrs.update(language=language, solution_code=solution, starter_code=starter, test_cases=None)
        return attrs

class StudentExerciseSerializer(serializers.ModelSerializer):
    """What a student sees: no solution code, no correct answers."""
    questions = serializers.SerializerMethodField()

    class Meta:
        model = Exercise
        fields = [
            'id', 'lesson', 'title', 'description', 'type', 'difficulty',
            'xp_reward', 'language', 'starter_code', 'questions'
        ]
        read_only_fields = fields

    def get_questions(self, obj):
        try:
            payload = parse_exercise(obj)
        except InvalidExercisePayload:
            # Rows saved outside the API may hold a broken payload
            logger.warning("Exercise %s has an invalid question payload", obj.pk)
            return []
        if isinstance(payload, MultipleChoiceExercise):
            return [q.to_dict(include_answer=False) for q in payload.questions]
        return []
