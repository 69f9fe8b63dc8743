from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from certificates.urls import router as certificates_router
from courses.urls import router as courses_router
from users.urls import router as users_router

# One browsable API root for every app's ViewSets
router = DefaultRouter()
for app_router in (users_router, certificates_router, courses_router):
    router.registry.extend(app_router.registry)

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Accounts, Session & Admin Dashboard ---
    path('api/', include('users.urls')),

    # --- Student Learning Flow ---
    path('api/', include('progress.urls')),

    # --- Certificates ---
    path('api/', include('certificates.urls')),

    # --- Notifications & Audit ---
    path('api/', include('cores.urls')),

    # --- Catalogue, user and template ViewSets ---
    path('api/', include(router.urls)),
]
