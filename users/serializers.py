from rest_framework import serializers
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

# Import models for aggregation
from progress.models import StudentXP
from certificates.models import Certificate

User = get_user_model()

class UserSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'role', 'is_staff', 'avatar_url', 'password']
        read_only_fields = ['is_staff']

    def get_fields(self):
        fields = super().get_fields()
        # Only staff may change roles
        request = self.context.get('request')
        if not (request and request.user.is_staff):
            fields['role'].read_only = True
        return fields

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        user = super().update(instance, validated_data)
        if password:
            user.set_password(password)
            user.save(update_fields=['password'])
        return user

class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'password', 'role']
        read_only_fields = ['id']

    def validate_role(self, value):
        request = self.context.get('request')
        if value != User.Role.STUDENT and not (request and request.user.is_staff):
            raise serializers.ValidationError("Only staff can assign elevated roles.")
        return value

    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['email'],
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data.get('first_name', ''),
            last_name=validated_data.get('last_name', ''),
            full_name=validated_data.get('full_name', ''),
            role=validated_data.get('role', User.Role.STUDENT)
        )
        return user

class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        data['user'] = UserSerializer(self.user).data
        return data

class StudentListSerializer(serializers.ModelSerializer):
    total_xp = serializers.SerializerMethodField()
    certificates_earned = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'total_xp', 'certificates_earned', 'date_joined']

    def get_total_xp(self, obj):
        xp = StudentXP.objects.filter(user=obj).first()
        return xp.total_xp if xp else 0

    def get_certificates_earned(self, obj):
        return Certificate.objects.filter(user=obj).count()
