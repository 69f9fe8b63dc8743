from rest_framework import serializers
from .models import Certificate, CertificateTemplate

class CertificateSerializer(serializers.ModelSerializer):
    module_title = serializers.CharField(source='module.title', read_only=True, default=None)

    class Meta:
        model = Certificate
        fields = [
            'id',
            'validation_code',
            'student_name',
            'course_name',
            'module',
            'module_title',
            'course',
            'hours_load',
            'score',
            'issued_at',
            'pdf_url',
        ]
        read_only_fields = fields

class CertificateValidationSerializer(serializers.ModelSerializer):
    """Public view of a certificate looked up by its code."""
    template_name = serializers.CharField(source='template.name', read_only=True, default=None)

    class Meta:
        model = Certificate
        fields = ['validation_code', 'student_name', 'course_name', 'hours_load', 'score', 'issued_at', 'template_name', 'pdf_url']
        read_only_fields = fields

class CertificatePdfSerializer(serializers.ModelSerializer):
    pdf_url = serializers.URLField()

    class Meta:
        model = Certificate
        fields = ['id', 'pdf_url']

class CertificateTemplateSerializer(serializers.ModelSerializer):
    min_score = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)
    min_attendance = serializers.IntegerField(min_value=0, max_value=100, required=False, allow_null=True)

    class Meta:
        model = CertificateTemplate
        fields = [
            'id', 'name', 'type', 'min_score', 'min_attendance', 'hours_load',
            'is_active', 'template_html', 'signature_url', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']
