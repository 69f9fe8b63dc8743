# certificates/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from courses.models import Course, Module

class CertificateTemplate(models.Model):
    class Type(models.TextChoices):
        MODULE = "module", "Module"
        COURSE = "course", "Course"
        CLASS = "class", "Class"

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.MODULE)

    # Issuance thresholds; null means no requirement
    min_score = models.PositiveIntegerField(null=True, blank=True)
    min_attendance = models.PositiveIntegerField(null=True, blank=True)
    hours_load = models.PositiveIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    template_html = models.TextField(blank=True)
    signature_url = models.URLField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.type})"

class Certificate(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='certificates')
    module = models.ForeignKey(Module, on_delete=models.SET_NULL, null=True, blank=True, related_name='certificates')
    course = models.ForeignKey(Course, on_delete=models.SET_NULL, null=True, blank=True, related_name='certificates')

    # Snapshots taken at issuance, never joined live
    course_name = models.CharField(max_length=255)
    student_name = models.CharField(max_length=255)

    # Public verification code
    validation_code = models.CharField(max_length=50, unique=True)
    issued_at = models.DateTimeField()

    template = models.ForeignKey(CertificateTemplate, on_delete=models.SET_NULL, null=True, blank=True, related_name='certificates')
    hours_load = models.PositiveIntegerField(null=True, blank=True)
    score = models.PositiveIntegerField(null=True, blank=True)

    # Filled in later by the rendering service
    pdf_url = models.URLField(null=True, blank=True)

    class Meta:
        ordering = ['-issued_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'module'],
                condition=Q(module__isnull=False),
                name='unique_module_certificate_per_user',
            ),
        ]

    def __str__(self):
        return f"Cert {self.validation_code} for {self.student_name}"
