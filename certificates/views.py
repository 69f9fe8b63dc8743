# certificates/views.py
import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, viewsets

from cores.models import AuditLog
from .models import Certificate, CertificateTemplate
from .serializers import (
    CertificateSerializer,
    CertificateValidationSerializer,
    CertificatePdfSerializer,
    CertificateTemplateSerializer,
)

logger = logging.getLogger(__name__)

class StudentCertificateListView(generics.ListAPIView):
    """List all certificates owned by the logged-in student."""
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = CertificateSerializer

    def get_queryset(self):
        return Certificate.objects.filter(user=self.request.user).select_related('module').order_by('-issued_at')


class CertificateValidationView(generics.RetrieveAPIView):
    """Public lookup of a certificate by its validation code."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    serializer_class = CertificateValidationSerializer

    def get_object(self):
        code = self.kwargs['validation_code'].strip()
        return get_object_or_404(Certificate.objects.select_related('template'), validation_code__iexact=code)


class CertificateInventoryView(generics.ListAPIView):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CertificateSerializer
    queryset = Certificate.objects.select_related('module').all().order_by('-issued_at')


class CertificatePdfView(generics.UpdateAPIView):
    """The rendering service stores the generated PDF location here."""
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CertificatePdfSerializer
    queryset = Certificate.objects.all()
    http_method_names = ['patch']

    def perform_update(self, serializer):
        certificate = serializer.save()
        logger.info("PDF attached to certificate %s", certificate.validation_code)


class CertificateTemplateViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CertificateTemplateSerializer
    queryset = CertificateTemplate.objects.all().order_by('-updated_at', '-id')

    def get_queryset(self):
        queryset = super().get_queryset()
        template_type = self.request.query_params.get('type')
        if template_type:
            queryset = queryset.filter(type=template_type)
        return queryset

    def perform_create(self, serializer):
        template = serializer.save()
        self._audit(AuditLog.Action.CREATE, template)

    def perform_update(self, serializer):
        template = serializer.save()
        self._audit(AuditLog.Action.UPDATE, template)

    def perform_destroy(self, instance):
        self._audit(AuditLog.Action.DELETE, instance)
        instance.delete()

    def _audit(self, action, template):
        AuditLog.objects.create(
            actor=self.request.user,
            action=action,
            target_model='CertificateTemplate',
            target_object_id=str(template.id),
            details=f"{action.label} template: {template.name}"
        )
