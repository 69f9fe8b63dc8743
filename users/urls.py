from django.urls import path
from rest_framework.routers import SimpleRouter
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    RegisterView,
    CustomLoginView,
    LogoutView,
    AdminStatsView,
    StudentListView,
    UserViewSet,
    UserProfileView
)

# ViewSets are mounted by the project router
router = SimpleRouter()
router.register(r'users', UserViewSet, basename='users')

urlpatterns = [
    # --- Session ---
    path('auth/register/', RegisterView.as_view(), name='register'),
    path('auth/login/', CustomLoginView.as_view(), name='login'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('auth/logout/', LogoutView.as_view(), name='logout'),

    # --- Admin Dashboard ---
    path('admin/stats/', AdminStatsView.as_view(), name='admin-stats'),
    path('admin/students/', StudentListView.as_view(), name='admin-students'),

    path('profile/', UserProfileView.as_view(), name='user-profile'),
]
