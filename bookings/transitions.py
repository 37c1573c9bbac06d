"""
Role-based booking status transitions.

Owners and admins may set any status, including moving a booking backwards.
Other roles only get the targets listed in ``ROLE_STATUS_TARGETS``, whatever
the current status, unless ``ROLE_LOCKED_STATUSES`` locks them out of it. Any
role can leave a booking where it is.
"""
import logging

from .constants import (
    ActorRole,
    BOOKING_FLOW,
    BookingStatus,
    ROLE_LOCKED_STATUSES,
    ROLE_STATUS_TARGETS,
    UNRESTRICTED_ROLES,
)
from .exceptions import InvalidTransition

logger = logging.getLogger(__name__)

STATUS_CANDIDATES = BOOKING_FLOW + [BookingStatus.CANCELLED]


def normalize_role(role):
    """Return the ActorRole for ``role``, or None when it is not a known role."""
    try:
        return ActorRole(role)
    except ValueError:
        return None


def is_transition_allowed(current, target, role):
    current = BookingStatus(current)
    target = BookingStatus(target)
    role = normalize_role(role)

    if target == current:
        return True
    if role in UNRESTRICTED_ROLES:
        return True
    if current in ROLE_LOCKED_STATUSES.get(role, ()):
        return False
    return target in ROLE_STATUS_TARGETS.get(role, ())


def get_available_options(current, role):
    current = BookingStatus(current)
    return [
        status for status in STATUS_CANDIDATES
        if status == current or is_transition_allowed(current, status, role)
    ]


def can_change_status(current, role):
    return len(get_available_options(current, role)) > 1


def ensure_transition_allowed(current, target, role):
    if not is_transition_allowed(current, target, role):
        logger.warning("Rejected status change %s -> %s for role %s", current, target, role)
        raise InvalidTransition(current, target, role)
