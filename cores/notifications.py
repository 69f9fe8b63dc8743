from .models import Notification


def notify(user, title, message, type=Notification.Type.INFO):
    return Notification.objects.create(user=user, title=title, message=message, type=type)


def notify_success(user, title, message):
    return notify(user, title, message, Notification.Type.SUCCESS)


def notify_error(user, title, message):
    return notify(user, title, message, Notification.Type.ERROR)
