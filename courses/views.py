from rest_framework import viewsets, filters

from cores.utils import id_query_param
from users.permissions import ReadOnlyOrInstructor
from .models import Course, Module, Lesson, Exercise
from .serializers import (
    CourseSerializer, ModuleSerializer, LessonSerializer,
    ExerciseSerializer, StudentExerciseSerializer
)


class ParentFilterMixin:
    """Filters the queryset by ``?<param>=<id>`` for each entry of ``parent_filters``."""
    parent_filters = {}

    def get_queryset(self):
        queryset = super().get_queryset()
        for param, field in self.parent_filters.items():
            value = id_query_param(self.request, param)
            if value is not None:
                queryset = queryset.filter(**{field: value})
        return queryset


class CourseViewSet(viewsets.ModelViewSet):
    queryset = Course.objects.all().order_by('order_index', 'id')
    serializer_class = CourseSerializer
    permission_classes = [ReadOnlyOrInstructor]

    filter_backends = [filters.SearchFilter]
    search_fields = ['title']


class ModuleViewSet(ParentFilterMixin, viewsets.ModelViewSet):
    queryset = Module.objects.select_related('course').order_by('course_id', 'order_index', 'id')
    serializer_class = ModuleSerializer
    permission_classes = [ReadOnlyOrInstructor]
    parent_filters = {'course_id': 'course_id'}


class LessonViewSet(ParentFilterMixin, viewsets.ModelViewSet):
    queryset = Lesson.objects.all().order_by('order_index', 'id')
    serializer_class = LessonSerializer
    permission_classes = [ReadOnlyOrInstructor]
    parent_filters = {'course_id': 'course_id', 'module_id': 'module_id'}


class ExerciseViewSet(ParentFilterMixin, viewsets.ModelViewSet):
    queryset = Exercise.objects.all().order_by('id')
    permission_classes = [ReadOnlyOrInstructor]
    parent_filters = {'lesson_id': 'lesson_id'}

    def get_serializer_class(self):
        # Students never receive solutions or correct answers
        if getattr(self.request.user, 'is_instructor', False):
            return ExerciseSerializer
        return StudentExerciseSerializer
