"""Utility functions for audit logging, licensee scoping and query parameter parsing"""
import logging
from datetime import datetime, time

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import ServiceError
from .models import AuditLog

logger = logging.getLogger(__name__)


def parse_query_date(value, name):
    """Parse a YYYY-MM-DD query parameter; malformed values are a 400"""
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ServiceError(f'{name} must be a date in YYYY-MM-DD format')
    return parsed


def parse_query_datetime(value, name):
    """Parse an ISO date or datetime query parameter into an aware datetime"""
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            parsed = datetime.combine(day, time.min) if day else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ServiceError(f'{name} must be an ISO 8601 date or datetime')
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def parse_query_id(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ServiceError(f'{name} must be a numeric id')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def scope_to_licensee(queryset, user, field='licensee_id'):
    """Restrict a queryset to rows owned by the user's licensee"""
    if user.is_superuser and not user.licensee_id:
        return queryset
    return queryset.filter(**{field: user.get_licensee_id()})


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, status_change, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        object_reference: Reference identifier such as a job ID
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(
                f"Audit log creation skipped: missing required fields "
                f"(action={action}, model_name={model_name}, object_id={object_id})"
            )
            return None

        is_authenticated = bool(audit_user and audit_user.is_authenticated)
        with transaction.atomic():
            return AuditLog.objects.create(
                user=audit_user if is_authenticated else None,
                licensee_id=audit_user.get_licensee_id() if is_authenticated else None,
                action=action,
                model_name=model_name,
                object_id=str(object_id),
                object_name=object_name,
                object_reference=object_reference,
                changes=changes or {},
                ip_address=ip_address
            )
    except Exception as e:
        # Audit failures never fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None
