from rest_framework import permissions


class IsAdminRole(permissions.BasePermission):
    """
    Allows access only to users whose persisted role is ADMIN.
    request.user is loaded from the database by the authentication backend,
    so a client-echoed role is never consulted.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "is_admin", False)
            and not user.is_blocked
        )


class IsAdminRoleOrReadOnly(IsAdminRole):
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_permission(request, view)
