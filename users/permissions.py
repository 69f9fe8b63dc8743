from rest_framework import permissions

class IsInstructorOrAdmin(permissions.BasePermission):
    """
    Allows access to staff, Teachers, Coordinators and Admins.
    Strictly blocks Students.
    """
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, 'is_instructor', False)


class ReadOnlyOrInstructor(IsInstructorOrAdmin):
    """Any authenticated user may read; only instructors may write."""
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
