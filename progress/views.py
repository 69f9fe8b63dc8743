from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, views
from rest_framework.response import Response

from cores.utils import id_query_param
from courses.models import Lesson, Exercise
from certificates.services import check_and_issue_module_certificate
from .models import StudentProgress, StudentXP
from .serializers import StudentProgressSerializer, StudentXPSerializer, ExerciseSubmitSerializer
from .services import complete_lesson, submit_exercise


def module_certificate_check(user, lesson):
    """Run the module certificate workflow for the lesson's module, if it has one."""
    if lesson is None or not (lesson.module_id and lesson.course_id):
        return None
    return check_and_issue_module_certificate(user.id, lesson.module_id, lesson.course_id).as_dict()


def total_xp(user):
    xp = StudentXP.objects.filter(user=user).first()
    return xp.total_xp if xp else 0


class CompleteLessonView(views.APIView):
    """
    Student finishes a lesson.
    Awards XP and checks whether the module certificate is due.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, lesson_id):
        lesson = get_object_or_404(Lesson, id=lesson_id)
        progress, xp_earned = complete_lesson(request.user, lesson)

        return Response({
            "status": "Lesson completed",
            "completed_at": progress.completed_at,
            "xp_earned": xp_earned,
            "total_xp": total_xp(request.user),
            "certificate": module_certificate_check(request.user, lesson),
        })


class SubmitExerciseView(views.APIView):
    """
    Student submits an exercise.
    Multiple choice answers are graded immediately.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, exercise_id):
        exercise = get_object_or_404(Exercise.objects.select_related('lesson'), id=exercise_id)
        serializer = ExerciseSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        progress, xp_earned = submit_exercise(request.user, exercise, serializer.validated_data['answers'])

        return Response({
            "status": "Submitted",
            "score": progress.score,
            "xp_earned": xp_earned,
            "total_xp": total_xp(request.user),
            "certificate": module_certificate_check(request.user, exercise.lesson),
        })


class StudentProgressListView(generics.ListAPIView):
    """List the logged-in student's progress rows."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StudentProgressSerializer

    def get_queryset(self):
        queryset = StudentProgress.objects.filter(user=self.request.user).order_by('-created_at')
        module_id = id_query_param(self.request, 'module_id')
        if module_id is not None:
            queryset = queryset.filter(Q(lesson__module_id=module_id) | Q(exercise__lesson__module_id=module_id))
        return queryset


class StudentXPView(generics.RetrieveAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = StudentXPSerializer

    def get_object(self):
        xp, _ = StudentXP.objects.get_or_create(user=self.request.user)
        return xp
