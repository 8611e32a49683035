from rest_framework.permissions import BasePermission


class IsEditor(BasePermission):
    """Editors only"""
    message = 'Editor access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_editor)


class IsAdminOrVA(BasePermission):
    """Admins, virtual assistants and licensees"""
    message = 'Admin or VA access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin_or_va)


class IsProductionStaff(BasePermission):
    """Everyone except editors"""
    message = 'Production staff access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_production_staff)
