from rest_framework import serializers
from .models import StudentProgress, StudentXP

class StudentProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = StudentProgress
        fields = ['id', 'lesson', 'exercise', 'completed', 'completed_at', 'score']
        read_only_fields = fields

class StudentXPSerializer(serializers.ModelSerializer):
    class Meta:
        model = StudentXP
        fields = ['total_xp', 'level', 'updated_at']
        read_only_fields = fields

class ExerciseSubmitSerializer(serializers.Serializer):
    # One chosen option per question, in question order
    answers = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
