from django.urls import path
from .views import CompleteLessonView, SubmitExerciseView, StudentProgressListView, StudentXPView

urlpatterns = [
    # Student learning flow
    path('lessons/<int:lesson_id>/complete/', CompleteLessonView.as_view(), name='complete-lesson'),
    path('exercises/<int:exercise_id>/submit/', SubmitExerciseView.as_view(), name='submit-exercise'),

    path('progress/', StudentProgressListView.as_view(), name='student-progress'),
    path('progress/xp/', StudentXPView.as_view(), name='student-xp'),
]
