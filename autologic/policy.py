"""
Authorization policy table.

Each (resource, action) pair maps to a Rule: the roles that are always allowed
plus an optional ownership predicate that can grant access to anyone else.
Handlers consult ``authorize`` (object-level checks) or depend on ``require``
(role-only checks) instead of comparing roles inline.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fastapi import Depends

from .auth import get_current_user
from .errors import Forbidden
from .models import User

logger = logging.getLogger(__name__)

ADMIN = "admin"
TECHNICIAN = "technician"
CUSTOMER = "customer"
ALL_ROLES = frozenset({ADMIN, TECHNICIAN, CUSTOMER})
STAFF = frozenset({ADMIN, TECHNICIAN})


@dataclass(frozen=True)
class Rule:
    roles: frozenset = field(default_factory=frozenset)
    owner: Optional[Callable[[User, Any], bool]] = None

    def allows(self, user: User, obj: Any = None) -> bool:
        if user.role in self.roles:
            return True
        if self.owner is not None and obj is not None:
            return bool(self.owner(user, obj))
        return False


def is_booking_customer(user: User, booking) -> bool:
    return booking.customer_id == user.id


def is_assigned_technician(user: User, obj) -> bool:
    return user.role == TECHNICIAN and obj.technician_id == user.id


def is_booking_party(user: User, booking) -> bool:
    return is_booking_customer(user, booking) or is_assigned_technician(user, booking)


def is_review_author(user: User, review) -> bool:
    return review.customer_id == user.id


ADMIN_ONLY = Rule(frozenset({ADMIN}))
AUTHENTICATED = Rule(ALL_ROLES)

POLICIES: dict[tuple[str, str], Rule] = {
    # Bookings
    ("booking", "create"): AUTHENTICATED,
    ("booking", "list"): ADMIN_ONLY,
    ("booking", "read"): Rule(frozenset({ADMIN}), is_booking_party),
    ("booking", "update"): Rule(frozenset({ADMIN}), is_booking_customer),
    ("booking", "cancel"): Rule(frozenset({ADMIN}), is_booking_customer),
    ("booking", "confirm"): ADMIN_ONLY,
    ("booking", "assign"): ADMIN_ONLY,
    ("booking", "update_status"): Rule(frozenset({ADMIN}), is_assigned_technician),
    ("booking", "add_note"): Rule(frozenset({ADMIN}), is_booking_party),
    ("booking", "add_internal_note"): Rule(STAFF),
    ("booking", "view_internal_notes"): Rule(STAFF),
    ("booking", "rate"): Rule(frozenset(), is_booking_customer),
    # Services
    ("service", "manage"): ADMIN_ONLY,
    # Reviews
    ("review", "create"): AUTHENTICATED,
    ("review", "update"): Rule(frozenset(), is_review_author),
    ("review", "delete"): Rule(frozenset({ADMIN}), is_review_author),
    ("review", "mark_helpful"): AUTHENTICATED,
    ("review", "respond"): ADMIN_ONLY,
    ("review", "moderate"): ADMIN_ONLY,
    # Projects
    ("project", "manage"): ADMIN_ONLY,
    ("project", "add_note"): Rule(STAFF),
    # Blog
    ("blog", "manage"): ADMIN_ONLY,
    ("blog", "view_unpublished"): ADMIN_ONLY,
    ("blog", "comment"): AUTHENTICATED,
    ("blog", "like"): AUTHENTICATED,
    # Back office
    ("contact", "manage"): ADMIN_ONLY,
    ("user", "manage"): ADMIN_ONLY,
    ("upload", "manage"): ADMIN_ONLY,
    ("dashboard", "view"): ADMIN_ONLY,
}


def is_allowed(user: Optional[User], resource: str, action: str, obj: Any = None) -> bool:
    if user is None:
        return False
    rule = POLICIES.get((resource, action))
    if rule is None:
        # Unknown pairs are denied
        logger.error(f"❌ No policy defined for {resource}:{action}")
        return False
    return rule.allows(user, obj)


def authorize(user: User, resource: str, action: str, obj: Any = None) -> None:
    """Raise Forbidden unless the policy table allows the action"""
    if not is_allowed(user, resource, action, obj):
        logger.warning(f"🚫 {user.role} user {user.id} denied {resource}:{action}")
        raise Forbidden("Access denied")


def require(resource: str, action: str):
    """
    Dependency factory for role-only rules

    Example:
        @router.post("", dependencies=[Depends(require("service", "manage"))])
    """

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, resource, action)
        return current_user

    return dependency
