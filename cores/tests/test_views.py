import pytest
from django.urls import reverse

from cores.models import AuditLog, Notification
from cores.notifications import notify_error, notify_success


@pytest.mark.django_db
class TestNotifications:

    def test_lists_only_own_notifications(self, api_client, student, teacher):
        notify_success(student, "Certificate issued", "Well done")
        notify_error(teacher, "Certificate not issued", "Try again")
        api_client.force_authenticate(student)

        response = api_client.get(reverse("notifications"))

        assert response.status_code == 200
        assert [n["title"] for n in response.data] == ["Certificate issued"]
        assert response.data[0]["type"] == "success"

    def test_mark_read(self, api_client, student):
        notification = notify_success(student, "Certificate issued", "Well done")
        api_client.force_authenticate(student)

        response = api_client.post(reverse("notification-read", args=[notification.id]))

        assert response.status_code == 200
        notification.refresh_from_db()
        assert notification.read
        unread = api_client.get(reverse("notifications"), {"unread": "true"})
        assert unread.data == []

    def test_cannot_touch_someone_elses_notification(self, api_client, student, teacher):
        notification = notify_success(teacher, "Hi", "There")
        api_client.force_authenticate(student)

        assert api_client.post(reverse("notification-read", args=[notification.id])).status_code == 404


@pytest.mark.django_db
class TestAuditLogs:

    def test_staff_filters_by_action(self, api_client, staff, student):
        AuditLog.objects.create(actor=student, action=AuditLog.Action.CERTIFICATE, target_model="Certificate")
        AuditLog.objects.create(actor=staff, action=AuditLog.Action.UPDATE, target_model="User")
        api_client.force_authenticate(staff)

        response = api_client.get(reverse("audit-logs"), {"action": "CERTIFICATE"})

        assert response.status_code == 200
        assert [row["actor_email"] for row in response.data] == ["student@example.com"]

    def test_students_are_refused(self, api_client, student):
        api_client.force_authenticate(student)
        assert api_client.get(reverse("audit-logs")).status_code == 403

    def test_notification_default_type(self, student):
        notification = Notification.objects.create(user=student, title="t", message="m")
        assert notification.type == Notification.Type.INFO


@pytest.mark.django_db
class TestApiRoot:

    def test_root_lists_every_viewset(self, api_client, student):
        api_client.force_authenticate(student)

        response = api_client.get(reverse("api-root"))

        assert response.status_code == 200
        for name in ("users", "courses", "modules", "lessons", "exercises", "admin/certificate-templates"):
            assert name in response.data
