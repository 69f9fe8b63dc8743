import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from certificates.models import CertificateTemplate
from courses.models import Course, Module, Lesson, Exercise

User = get_user_model()

PASSWORD = "pass12345"

QUIZ = [
    {"question_text": "2 + 2?", "options": ["3", "4"], "correct_answer": "4"},
    {"question_text": "Capital of France?", "options": ["Paris", "Rome"], "correct_answer": "Paris"},
]


@pytest.fixture(autouse=True)
def fast_hashing(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


def make_user(email, role=User.Role.STUDENT, **extra):
    return User.objects.create_user(username=email, email=email, password=PASSWORD, role=role, **extra)


@pytest.fixture
def user_factory(db):
    return make_user


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def student(db):
    return make_user("student@example.com", full_name="Ana Souza")


@pytest.fixture
def teacher(db):
    return make_user("teacher@example.com", role=User.Role.TEACHER)


@pytest.fixture
def staff(db):
    return make_user("staff@example.com", role=User.Role.ADMIN, is_staff=True)


@pytest.fixture
def module_tree(db):
    """A course with one module: two lessons, the first holding two quizzes."""
    course = Course.objects.create(title="Python Basics")
    module = Module.objects.create(course=course, title="Variables")
    lesson_1 = Lesson.objects.create(course=course, module=module, title="Names", order_index=1)
    lesson_2 = Lesson.objects.create(course=course, module=module, title="Types", order_index=2)
    quiz_1 = Exercise.objects.create(lesson=lesson_1, title="Quiz 1", test_cases=QUIZ)
    quiz_2 = Exercise.objects.create(lesson=lesson_1, title="Quiz 2", test_cases=QUIZ)
    return {
        "course": course,
        "module": module,
        "lessons": [lesson_1, lesson_2],
        "exercises": [quiz_1, quiz_2],
    }


@pytest.fixture
def module_template(db):
    return CertificateTemplate.objects.create(
        name="Module certificate",
        type=CertificateTemplate.Type.MODULE,
        min_score=70,
        min_attendance=75,
        hours_load=8,
        is_active=True,
    )
