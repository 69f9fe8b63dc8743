from rest_framework.routers import SimpleRouter
from .views import CourseViewSet, ModuleViewSet, LessonViewSet, ExerciseViewSet

# Mounted by the project router
router = SimpleRouter()
router.register(r'courses', CourseViewSet, basename='courses')
router.register(r'modules', ModuleViewSet, basename='modules')
router.register(r'lessons', LessonViewSet, basename='lessons')
router.register(r'exercises', ExerciseViewSet, basename='exercises')
