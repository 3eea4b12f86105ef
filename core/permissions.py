"""
Custom permission classes and ownership rules for the Vehicle Marketplace.
"""

from rest_framework import permissions
from rest_framework.exceptions import NotAuthenticated

from .models import Role


# ============================================================================
# Ownership rules
# ============================================================================

ACCOUNT_UPDATE = 'update'
ACCOUNT_DEACTIVATE = 'deactivate'
ACCOUNT_DELETE = 'delete'


def can_manage_account(actor, target, action=ACCOUNT_UPDATE):
    """
    Whether an admin may apply an action to the target account.

    Admins can never act on their own account through the administration
    endpoints, and can never deactivate or delete another admin.

    Args:
        actor: Authenticated Account
        target: Account being managed
        action: ACCOUNT_UPDATE, ACCOUNT_DEACTIVATE or ACCOUNT_DELETE

    Returns:
        bool
    """
    if not actor.is_admin:
        return False

    if actor.pk == target.pk:
        return False

    if target.is_admin and action in (ACCOUNT_DEACTIVATE, ACCOUNT_DELETE):
        return False

    return True


def can_cancel_booking(actor, booking):
    """Creator of the reservation/test drive, or an admin."""
    return actor.is_admin or booking.account_id == actor.pk


def can_view_booking(actor, booking):
    """Creator of the reservation/test drive, or an admin."""
    return actor.is_admin or booking.account_id == actor.pk


# ============================================================================
# Permission classes
# ============================================================================

def require_role(*roles):
    """
    Build a permission class allowing only the given roles.

    Anonymous requests are answered with 401, authenticated accounts with
    another role with 403.

    Usage:
        class MyView(APIView):
            permission_classes = [require_role(Role.ADMIN)]
    """
    allowed = frozenset(Role(role) for role in roles)

    class RolePermission(permissions.BasePermission):
        message = 'Not authorized to access this route.'

        def has_permission(self, request, view):
            if not request.user or not request.user.is_authenticated:
                raise NotAuthenticated()

            return request.user.role in allowed

    RolePermission.__name__ = f"Require{''.join(role.title() for role in sorted(allowed))}Role"
    return RolePermission


IsAdmin = require_role(Role.ADMIN)


class CanManageAccount(permissions.BasePermission):
    """
    Object permission for the account administration endpoints.

    Combined with IsAdmin, which answers 401/403 first. Reading needs no
    further check. Updating or deleting requires that the target is not the
    caller; deleting also requires that the target is not an admin.
    Deactivating another admin is checked by the view once the request body
    has been validated.

    Usage:
        class UserDetailView(APIView):
            permission_classes = [IsAdmin, CanManageAccount]
    """

    message = 'You cannot modify your own account through this interface.'

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True

        action = ACCOUNT_DELETE if request.method == 'DELETE' else ACCOUNT_UPDATE

        if obj.pk == request.user.pk:
            self.message = (
                'You cannot delete your own account.' if action == ACCOUNT_DELETE
                else 'You cannot modify your own account through this interface.'
            )
        elif obj.is_admin and action == ACCOUNT_DELETE:
            self.message = 'You cannot delete another administrator.'

        return can_manage_account(request.user, obj, action)


class IsBookingOwnerOrAdmin(permissions.BasePermission):
    """
    Object permission for reading a single reservation or test drive.

    Usage:
        class ReservationDetailView(APIView):
            permission_classes = [IsAuthenticated, IsBookingOwnerOrAdmin]
    """

    message = 'Not authorized to access this booking.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        return can_view_booking(request.user, obj)
