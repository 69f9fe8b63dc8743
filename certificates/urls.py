from django.urls import path
from rest_framework.routers import SimpleRouter
from .views import (
    StudentCertificateListView,
    CertificateValidationView,
    CertificateInventoryView,
    CertificatePdfView,
    CertificateTemplateViewSet,
)

router = SimpleRouter()
router.register(r'admin/certificate-templates', CertificateTemplateViewSet, basename='certificate-templates')

urlpatterns = [
    path('certificates/', StudentCertificateListView.as_view(), name='student-certificates'),
    path('certificates/validate/<str:validation_code>/', CertificateValidationView.as_view(), name='certificate-validate'),
    path('admin/certificates/', CertificateInventoryView.as_view(), name='admin-certificates'),
    path('admin/certificates/<int:pk>/pdf/', CertificatePdfView.as_view(), name='certificate-pdf'),
]
