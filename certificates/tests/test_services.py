import pytest
from django.db import DatabaseError
from django.utils import timezone

from certificates import services
from certificates.codes import ValidationCodeError
from certificates.models import Certificate, CertificateTemplate
from certificates.services import (
    IssuanceStatus,
    average_exercise_score,
    check_and_issue_module_certificate,
    issue_module_certificate,
    select_active_module_template,
)
from cores.models import AuditLog, Notification
from courses.models import Exercise, Module
from progress.models import StudentProgress


def complete(user, lessons=(), exercises=(), scores=None):
    scores = scores or {}
    for lesson in lessons:
        StudentProgress.objects.create(user=user, lesson=lesson, completed=True, completed_at=timezone.now())
    for exercise in exercises:
        StudentProgress.objects.create(
            user=user, exercise=exercise, completed=True,
            completed_at=timezone.now(), score=scores.get(exercise.id),
        )


def run(user, tree):
    return check_and_issue_module_certificate(user.id, tree["module"].id, tree["course"].id)


@pytest.mark.django_db
class TestCompletionGate:

    def test_issues_when_every_lesson_and_exercise_is_complete(self, student, module_tree, module_template):
        quiz_1, quiz_2 = module_tree["exercises"]
        complete(student, module_tree["lessons"], module_tree["exercises"], {quiz_1.id: 100, quiz_2.id: 80})

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.ISSUED
        assert result.issued
        cert = result.certificate
        assert cert.user == student
        assert cert.module == module_tree["module"]
        assert cert.course_name == "Python Basics"
        assert cert.student_name == "Ana Souza"
        assert cert.score == 90
        assert cert.hours_load == 8
        assert cert.template == module_template
        assert cert.pdf_url is None
        assert cert.validation_code.startswith("CERT-")

    def test_missing_exercise_completion_blocks_issuance(self, student, module_tree, module_template):
        quiz_1, _ = module_tree["exercises"]
        complete(student, module_tree["lessons"], [quiz_1], {quiz_1.id: 100})

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.NOT_ELIGIBLE
        assert result.reason == "module not completed"
        assert not Certificate.objects.exists()

    def test_incomplete_exercise_row_does_not_count(self, student, module_tree, module_template):
        quiz_1, quiz_2 = module_tree["exercises"]
        complete(student, module_tree["lessons"], [quiz_1], {quiz_1.id: 100})
        StudentProgress.objects.create(user=student, exercise=quiz_2, completed=False, score=90)

        assert run(student, module_tree).status == IssuanceStatus.NOT_ELIGIBLE

    def test_missing_lesson_completion_blocks_issuance(self, student, module_tree, module_template):
        complete(student, module_tree["lessons"][:1], module_tree["exercises"])

        assert run(student, module_tree).status == IssuanceStatus.NOT_ELIGIBLE

    def test_other_students_progress_is_ignored(self, student, teacher, module_tree, module_template):
        complete(teacher, module_tree["lessons"], module_tree["exercises"])

        assert run(student, module_tree).status == IssuanceStatus.NOT_ELIGIBLE

    def test_module_without_lessons_is_not_actionable(self, student, module_tree, module_template):
        empty = Module.objects.create(course=module_tree["course"], title="Empty")

        result = check_and_issue_module_certificate(student.id, empty.id, module_tree["course"].id)

        assert result.status == IssuanceStatus.NOT_ELIGIBLE
        assert result.reason == "module has no lessons"

    def test_missing_identifiers_fail_without_notification(self, student, module_tree):
        result = check_and_issue_module_certificate(student.id, None, module_tree["course"].id)

        assert result.status == IssuanceStatus.FAILED
        assert not Notification.objects.exists()


class TestAverageScore:

    def test_unscored_exercises_are_excluded(self):
        assert average_exercise_score([1, 2, 3], {1: 100, 2: 50}) == 75

    def test_no_scores_yields_zero(self):
        assert average_exercise_score([1, 2], {}) == 0

    def test_halves_round_up(self):
        assert average_exercise_score([1, 2], {1: 70, 2: 71}) == 71

    def test_scores_outside_the_module_are_ignored(self):
        assert average_exercise_score([1], {1: 60, 9: 100}) == 60


@pytest.mark.django_db
class TestTemplateRules:

    def test_null_score_is_excluded_from_the_average(self, student, module_tree, module_template):
        quiz_1, quiz_2 = module_tree["exercises"]
        quiz_3 = Exercise.objects.create(lesson=module_tree["lessons"][1], title="Quiz 3", test_cases=quiz_1.test_cases)
        complete(student, module_tree["lessons"], [quiz_1, quiz_2, quiz_3], {quiz_1.id: 100, quiz_2.id: 50})

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.ISSUED
        assert result.certificate.score == 75

    def test_score_one_below_minimum_is_rejected(self, student, module_tree, module_template):
        quiz_1, quiz_2 = module_tree["exercises"]
        complete(student, module_tree["lessons"], module_tree["exercises"], {quiz_1.id: 69, quiz_2.id: 69})

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.NOT_ELIGIBLE
        assert "below minimum 70" in result.reason
        assert not Certificate.objects.exists()

    def test_score_at_minimum_is_accepted(self, student, module_tree, module_template):
        quiz_1, quiz_2 = module_tree["exercises"]
        complete(student, module_tree["lessons"], module_tree["exercises"], {quiz_1.id: 70, quiz_2.id: 70})

        assert run(student, module_tree).status == IssuanceStatus.ISSUED
        assert Certificate.objects.get().score == 70

    def test_scoreless_module_fails_a_nonzero_minimum(self, student, module_tree, module_template):
        complete(student, module_tree["lessons"], module_tree["exercises"])

        assert run(student, module_tree).status == IssuanceStatus.NOT_ELIGIBLE

    def test_scoreless_module_passes_without_minimum(self, student, module_tree, module_template):
        module_template.min_score = None
        module_template.save()
        complete(student, module_tree["lessons"], module_tree["exercises"])

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.ISSUED
        assert result.certificate.score == 0

    def test_attendance_above_100_can_never_be_met(self, student, module_tree, module_template):
        module_template.min_score = 0
        module_template.min_attendance = 101
        module_template.save()
        complete(student, module_tree["lessons"], module_tree["exercises"])

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.NOT_ELIGIBLE
        assert result.reason.startswith("attendance")

    def test_no_active_template_issues_nothing_and_stays_silent(self, student, module_tree):
        CertificateTemplate.objects.create(name="Old", type=CertificateTemplate.Type.MODULE, is_active=False)
        CertificateTemplate.objects.create(name="Course", type=CertificateTemplate.Type.COURSE, is_active=True)
        complete(student, module_tree["lessons"], module_tree["exercises"])

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.TEMPLATE_MISSING
        assert not Certificate.objects.exists()
        assert not Notification.objects.exists()

    def test_most_recently_updated_template_wins(self, module_template):
        newer = CertificateTemplate.objects.create(name="Newer", type=CertificateTemplate.Type.MODULE)
        assert select_active_module_template() == newer

        module_template.hours_load = 10
        module_template.save()
        assert select_active_module_template() == module_template


@pytest.mark.django_db
class TestIssuance:

    def _complete_all(self, student, tree):
        quiz_1, quiz_2 = tree["exercises"]
        complete(student, tree["lessons"], tree["exercises"], {quiz_1.id: 100, quiz_2.id: 100})

    def test_second_run_issues_nothing_and_sends_nothing(self, student, module_tree, module_template):
        self._complete_all(student, module_tree)

        first = run(student, module_tree)
        second = run(student, module_tree)

        assert first.status == IssuanceStatus.ISSUED
        assert second.status == IssuanceStatus.ALREADY_ISSUED
        assert Certificate.objects.filter(user=student).count() == 1
        assert Notification.objects.filter(user=student).count() == 1

    def test_success_notifies_and_audits(self, student, module_tree, module_template):
        self._complete_all(student, module_tree)

        cert = run(student, module_tree).certificate

        notification = Notification.objects.get(user=student)
        assert notification.type == Notification.Type.SUCCESS
        assert "Variables" in notification.message
        log = AuditLog.objects.get(action=AuditLog.Action.CERTIFICATE)
        assert log.target_object_id == str(cert.id)

    def test_unique_constraint_reports_already_issued(self, student, module_tree, module_template):
        # Another run inserted between the duplicate check and this insert
        Certificate.objects.create(
            user=student, module=module_tree["module"], course_name="x", student_name="y",
            validation_code="CERT-2026-RACE0001", issued_at=timezone.now(),
        )

        result = issue_module_certificate(
            student.id, module_tree["module"].id, module_tree["course"].id, module_template, 90
        )

        assert result.status == IssuanceStatus.ALREADY_ISSUED
        assert Certificate.objects.count() == 1
        assert not Notification.objects.exists()

    def test_code_generation_failure_notifies_the_student(self, student, module_tree, module_template, monkeypatch):
        self._complete_all(student, module_tree)

        def broken():
            raise ValidationCodeError("exhausted")

        monkeypatch.setattr(services, "generate_validation_code", broken)

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.FAILED
        assert not Certificate.objects.exists()
        assert Notification.objects.get(user=student).type == Notification.Type.ERROR

    def test_read_failure_fails_quietly(self, student, module_tree, module_template, monkeypatch):
        self._complete_all(student, module_tree)

        def broken():
            raise DatabaseError("connection lost")

        monkeypatch.setattr(services, "select_active_module_template", broken)

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.FAILED
        assert result.reason == "database read failed"
        assert not Certificate.objects.exists()
        assert not Notification.objects.exists()

    def test_validation_code_clash_fails_and_notifies(self, student, teacher, module_tree, module_template, monkeypatch):
        self._complete_all(student, module_tree)
        Certificate.objects.create(
            user=teacher, module=module_tree["module"], course_name="x", student_name="y",
            validation_code="CERT-2026-TAKEN001", issued_at=timezone.now(),
        )
        monkeypatch.setattr(services, "generate_validation_code", lambda: "CERT-2026-TAKEN001")

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.FAILED
        assert result.reason == "insert failed"
        assert not Certificate.objects.filter(user=student).exists()
        assert Notification.objects.get(user=student).type == Notification.Type.ERROR

    def test_insert_database_error_fails_and_notifies(self, student, module_tree, module_template, monkeypatch):
        self._complete_all(student, module_tree)

        def broken(**kwargs):
            raise DatabaseError("disk full")

        monkeypatch.setattr(Certificate.objects, "create", broken)

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.FAILED
        assert result.reason == "insert failed"
        assert Notification.objects.get(user=student).type == Notification.Type.ERROR

    def test_audit_failure_keeps_the_issued_certificate(self, student, module_tree, module_template, monkeypatch):
        self._complete_all(student, module_tree)

        def broken(**kwargs):
            raise DatabaseError("audit table down")

        monkeypatch.setattr(AuditLog.objects, "create", broken)

        result = run(student, module_tree)

        assert result.status == IssuanceStatus.ISSUED
        assert Certificate.objects.get(user=student) == result.certificate

    def test_missing_course_fails(self, student, module_tree, module_template):
        self._complete_all(student, module_tree)

        result = check_and_issue_module_certificate(student.id, module_tree["module"].id, 987654)

        assert result.status == IssuanceStatus.FAILED
        assert result.reason == "course not found"

    def test_names_are_snapshots(self, student, module_tree, module_template):
        self._complete_all(student, module_tree)
        cert = run(student, module_tree).certificate

        student.full_name = "Ana Lima"
        student.save()
        module_tree["course"].title = "Python Fundamentals"
        module_tree["course"].save()

        cert.refresh_from_db()
        assert cert.student_name == "Ana Souza"
        assert cert.course_name == "Python Basics"

    def test_display_name_falls_back_to_email(self, user_factory, module_tree, module_template):
        nameless = user_factory("nameless@example.com")
        self._complete_all(nameless, module_tree)

        cert = run(nameless, module_tree).certificate

        assert cert.student_name == "nameless@example.com"

    def test_result_serialises_for_callers(self, student, module_tree, module_template):
        self._complete_all(student, module_tree)

        data = run(student, module_tree).as_dict()

        assert data["status"] == "issued"
        assert data["validation_code"] == Certificate.objects.get().validation_code
