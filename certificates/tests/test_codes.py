import re

import pytest
from django.utils import timezone

from certificates import codes
from certificates.codes import ValidationCodeError, build_validation_code, generate_validation_code
from certificates.models import Certificate


class TestBuildValidationCode:

    def test_format(self, settings):
        settings.CERTIFICATE_CODE_PREFIX = "JC"
        code = build_validation_code(year=2026)
        assert re.fullmatch(r"JC-2026-[A-Z2-9]{8}", code)

    def test_codes_differ(self):
        assert len({build_validation_code() for _ in range(20)}) == 20


@pytest.mark.django_db
class TestGenerateValidationCode:

    def test_returns_unused_code(self):
        code = generate_validation_code()
        assert not Certificate.objects.filter(validation_code=code).exists()

    def test_retries_after_collision(self, student, monkeypatch):
        Certificate.objects.create(
            user=student, course_name="c", student_name="s",
            validation_code="CERT-2026-TAKEN000", issued_at=timezone.now(),
        )
        candidates = iter(["CERT-2026-TAKEN000", "CERT-2026-FRESH000"])
        monkeypatch.setattr(codes, "build_validation_code", lambda: next(candidates))

        assert generate_validation_code() == "CERT-2026-FRESH000"

    def test_gives_up_after_max_attempts(self, student, settings, monkeypatch):
        settings.CERTIFICATE_CODE_MAX_ATTEMPTS = 3
        Certificate.objects.create(
            user=student, course_name="c", student_name="s",
            validation_code="CERT-2026-TAKEN000", issued_at=timezone.now(),
        )
        monkeypatch.setattr(codes, "build_validation_code", lambda: "CERT-2026-TAKEN000")

        with pytest.raises(ValidationCodeError):
            generate_validation_code()
