# certificates/services.py
"""
Module completion certificates.

``check_and_issue_module_certificate`` runs after a student finishes a lesson
or an exercise. The steps run strictly in order and each one either hands
over to the next or ends the run with an ``IssuanceResult``:

1. completion - every lesson of the module and every exercise of those
   lessons has a completed progress row for the student;
2. score - average over the exercises that carry a recorded score;
3. template - the active "module" template and its thresholds;
4. duplicate check - one certificate per (student, module);
5. issue - validation code, insert, notification and audit entry.

Nothing is raised to the caller. Ineligible runs are logged and return a
result whose ``status`` says why; only a failed write notifies the student.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, models, transaction
from django.utils import timezone

from cores.models import AuditLog
from cores.notifications import notify_error, notify_success
from cores.utils import round_half_up
from courses.models import Course, Exercise, Lesson, Module
from progress.models import StudentProgress
from .codes import ValidationCodeError, generate_validation_code
from .models import Certificate, CertificateTemplate

logger = logging.getLogger(__name__)

User = get_user_model()

# Completing every lesson counts as full attendance
ASSUMED_ATTENDANCE = 100


class IssuanceStatus(models.TextChoices):
    ISSUED = "issued", "Issued"
    ALREADY_ISSUED = "already_issued", "Already issued"
    NOT_ELIGIBLE = "not_eligible", "Not eligible"
    TEMPLATE_MISSING = "template_missing", "No active template"
    FAILED = "failed", "Failed"


@dataclass(frozen=True)
class IssuanceResult:
    status: str
    reason: str = ""
    certificate: Optional[Certificate] = None

    @property
    def issued(self):
        return self.status == IssuanceStatus.ISSUED

    def as_dict(self):
        return {
            "status": str(self.status),
            "reason": self.reason,
            "validation_code": self.certificate.validation_code if self.certificate else None,
        }


@dataclass
class ModuleCompletion:
    lesson_ids: List[int]
    exercise_ids: List[int]
    completed_lesson_ids: Set[int] = field(default_factory=set)
    completed_exercise_ids: Set[int] = field(default_factory=set)
    exercise_scores: Dict[int, int] = field(default_factory=dict)

    @property
    def is_complete(self):
        # Exercises do not pass just because their lesson is complete
        return (
            all(lesson_id in self.completed_lesson_ids for lesson_id in self.lesson_ids)
            and all(exercise_id in self.completed_exercise_ids for exercise_id in self.exercise_ids)
        )


def evaluate_module_completion(user_id, module_id):
    """Collect the student's progress over a module, or ``None`` when it has no lessons."""
    lesson_ids = list(
        Lesson.objects.filter(module_id=module_id).order_by('order_index', 'id').values_list('id', flat=True)
    )
    if not lesson_ids:
        return None

    exercise_ids = list(Exercise.objects.filter(lesson_id__in=lesson_ids).values_list('id', flat=True))
    completion = ModuleCompletion(lesson_ids=lesson_ids, exercise_ids=exercise_ids)

    rows = StudentProgress.objects.filter(user_id=user_id).values('lesson_id', 'exercise_id', 'completed', 'score')
    for row in rows:
        if row['lesson_id'] and row['completed']:
            completion.completed_lesson_ids.add(row['lesson_id'])
        if row['exercise_id']:
            if row['completed']:
                completion.completed_exercise_ids.add(row['exercise_id'])
            if row['score'] is not None:
                completion.exercise_scores[row['exercise_id']] = row['score']
    return completion


def average_exercise_score(exercise_ids, exercise_scores):
    """Rounded mean of the recorded scores; unscored exercises are left out, not counted as zero."""
    scores = [exercise_scores[exercise_id] for exercise_id in exercise_ids if exercise_id in exercise_scores]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def select_active_module_template():
    # Several active templates: the most recently updated wins
    return (
        CertificateTemplate.objects
        .filter(type=CertificateTemplate.Type.MODULE, is_active=True)
        .order_by('-updated_at', '-id')
        .first()
    )


def unmet_template_requirement(template, average_score):
    """Return why the thresholds are not met, or ``None`` when they are."""
    min_score = template.min_score or 0
    if average_score < min_score:
        return f"score {average_score} below minimum {min_score}"

    min_attendance = template.min_attendance or 0
    if ASSUMED_ATTENDANCE < min_attendance:
        return f"attendance {ASSUMED_ATTENDANCE} below minimum {min_attendance}"
    return None


def _not_issued(status, reason, user_id, module_id, level=logging.INFO):
    logger.log(level, "No certificate for user %s module %s: %s", user_id, module_id, reason)
    return IssuanceResult(status=status, reason=reason)


def check_and_issue_module_certificate(user_id, module_id, course_id):
    logger.info("Certificate check started for user %s module %s course %s", user_id, module_id, course_id)

    if not (user_id and module_id and course_id):
        return _not_issued(IssuanceStatus.FAILED, "missing identifiers", user_id, module_id, logging.ERROR)

    try:
        completion = evaluate_module_completion(user_id, module_id)
        if completion is None:
            return _not_issued(IssuanceStatus.NOT_ELIGIBLE, "module has no lessons", user_id, module_id)
        if not completion.is_complete:
            return _not_issued(IssuanceStatus.NOT_ELIGIBLE, "module not completed", user_id, module_id)

        average_score = average_exercise_score(completion.exercise_ids, completion.exercise_scores)
        logger.debug("Average score for user %s module %s: %s", user_id, module_id, average_score)

        template = select_active_module_template()
        if template is None:
            return _not_issued(IssuanceStatus.TEMPLATE_MISSING, "no active module template", user_id, module_id)

        unmet = unmet_template_requirement(template, average_score)
        if unmet:
            return _not_issued(IssuanceStatus.NOT_ELIGIBLE, unmet, user_id, module_id)

        if Certificate.objects.filter(user_id=user_id, module_id=module_id).exists():
            return _not_issued(IssuanceStatus.ALREADY_ISSUED, "certificate already issued", user_id, module_id)
    except DatabaseError:
        logger.exception("Certificate check failed reading data for user %s module %s", user_id, module_id)
        return IssuanceResult(status=IssuanceStatus.FAILED, reason="database read failed")

    return issue_module_certificate(user_id, module_id, course_id, template, average_score)


def issue_module_certificate(user_id, module_id, course_id, template, score):
    """Persist the certificate; a clash on (user, module) means another run got there first."""
    try:
        user = User.objects.filter(pk=user_id).first()
        module = Module.objects.filter(pk=module_id).first()
        course = Course.objects.filter(pk=course_id).first()
    except DatabaseError:
        logger.exception("Certificate issue failed loading names for user %s module %s", user_id, module_id)
        return IssuanceResult(status=IssuanceStatus.FAILED, reason="database read failed")

    for label, obj in (("student", user), ("module", module), ("course", course)):
        if obj is None:
            return _not_issued(IssuanceStatus.FAILED, f"{label} not found", user_id, module_id, logging.ERROR)

    try:
        validation_code = generate_validation_code()
    except (ValidationCodeError, DatabaseError):
        logger.exception("Validation code generation failed for user %s module %s", user_id, module_id)
        notify_error(user, "Certificate not issued", "Could not generate a validation code for your certificate.")
        return IssuanceResult(status=IssuanceStatus.FAILED, reason="validation code unavailable")

    try:
        with transaction.atomic():
            certificate = Certificate.objects.create(
                user=user,
                module=module,
                course=course,
                # Course title labels the module certificate
                course_name=course.title,
                student_name=user.display_name,
                validation_code=validation_code,
                issued_at=timezone.now(),
                template=template,
                hours_load=template.hours_load,
                score=score,
                pdf_url=None,
            )
    except IntegrityError:
        if Certificate.objects.filter(user_id=user_id, module_id=module_id).exists():
            return _not_issued(IssuanceStatus.ALREADY_ISSUED, "certificate already issued", user_id, module_id)
        logger.exception("Certificate insert failed for user %s module %s", user_id, module_id)
        notify_error(user, "Certificate not issued", f'We could not issue your certificate for "{module.title}".')
        return IssuanceResult(status=IssuanceStatus.FAILED, reason="insert failed")
    except DatabaseError:
        logger.exception("Certificate insert failed for user %s module %s", user_id, module_id)
        notify_error(user, "Certificate not issued", f'We could not issue your certificate for "{module.title}".')
        return IssuanceResult(status=IssuanceStatus.FAILED, reason="insert failed")

    try:
        with transaction.atomic():
            AuditLog.objects.create(
                actor=user,
                action=AuditLog.Action.CERTIFICATE,
                target_model='Certificate',
                target_object_id=str(certificate.id),
                details=f"Module certificate {validation_code} issued for {module.title}"
            )
            notify_success(user, "Certificate issued", f'Your certificate for the module "{module.title}" has been issued.')
    except DatabaseError:
        # The certificate row stands even when its audit trail cannot be written
        logger.exception("Audit or notification failed after issuing certificate %s", validation_code)
    logger.info("Certificate %s issued to user %s for module %s", validation_code, user_id, module_id)
    return IssuanceResult(status=IssuanceStatus.ISSUED, reason="", certificate=certificate)
