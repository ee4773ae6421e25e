# backend/users/permissions.py
from rest_framework.permissions import BasePermission

from erp.exceptions import ForbiddenError

# ---- capability keys ---------------------------------------------------------

ALLOCATION_WRITE = "allocation:write"
ALLOCATION_VIEW = "allocation:view"
SEMESTER_WRITE = "allocation:semester:write"
FORM_PUBLISH = "allocation:form:publish"
FORM_VIEW = "allocation:form:view"
BUILDER_WRITE = "allocation:builder:write"
COURSES_WRITE = "allocation:courses:write"
COURSES_SYNC = "allocation:courses:sync"


def has_capability(user, permission_key):
    """Staff bypass; everyone else needs the key on one of their active roles."""
    if not user or not getattr(user, "is_authenticated", False):
        return False
    if user.is_staff:
        return True
    return user.has_custom_permission(permission_key)


def require_capability(user, permission_key):
    if not has_capability(user, permission_key):
        raise ForbiddenError(f"Missing permission '{permission_key}'.")


class HasCapability(BasePermission):
    """
    View-level gate. Subclass with ``permission_key`` set, or use
    :func:`capability` to build one inline.
    """
    permission_key = None

    def has_permission(self, request, view):
        if self.permission_key is None:
            return bool(request.user and request.user.is_authenticated)
        return has_capability(request.user, self.permission_key)


def capability(permission_key):
    return type(
        f"HasCapability_{permission_key.replace(':', '_')}",
        (HasCapability,),
        {"permission_key": permission_key},
    )
