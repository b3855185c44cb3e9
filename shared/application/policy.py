"""
Access Policy

One place that answers "may this subject perform this action on this
resource". Views and command handlers ask the policy instead of
checking roles inline.

Resources describe themselves through two attributes:
    owner_id   - id of the user the resource belongs to (may be None)
    manager_id - id of the user managing the space behind the resource
"""

from typing import Any
import logging

from shared.domain.errors import Forbidden

logger = logging.getLogger(__name__)


class Action:
    VIEW = 'view'
    CREATE = 'create'
    UPDATE_STATUS = 'update_status'
    CANCEL = 'cancel'
    DELETE = 'delete'
    PAY = 'pay'
    MANAGE = 'manage'


# which relation to the resource grants each action
_RULES = {
    Action.VIEW: ('owner', 'manager'),
    Action.CREATE: ('owner', 'manager'),
    Action.UPDATE_STATUS: ('manager',),
    Action.CANCEL: ('owner', 'manager'),
    Action.DELETE: ('owner',),
    Action.PAY: ('owner',),
    Action.MANAGE: ('manager',),
}


def is_admin(subject: Any) -> bool:
    if subject is None or not getattr(subject, 'is_authenticated', False):
        return False
    check = getattr(subject, 'is_admin_role', None)
    if callable(check):
        return check()
    return bool(getattr(subject, 'is_superuser', False) or getattr(subject, 'is_staff', False))


class AccessPolicy:
    """Role and relationship based policy"""

    def is_allowed(self, subject: Any, action: str, resource: Any) -> bool:
        if subject is None or not getattr(subject, 'is_authenticated', False):
            return False
        if is_admin(subject):
            return True

        relations = _RULES.get(action)
        if relations is None:
            raise ValueError(f"Unknown action: {action}")

        subject_id = getattr(subject, 'pk', None)
        if 'owner' in relations and getattr(resource, 'owner_id', None) == subject_id:
            return True
        if 'manager' in relations and subject_id is not None:
            if getattr(resource, 'manager_id', None) == subject_id:
                return True
        return False

    def require(self, subject: Any, action: str, resource: Any, message: str = ''):
        """Raise Forbidden unless the action is allowed"""
        if not self.is_allowed(subject, action, resource):
            logger.info(
                f"Denied {action} on {resource.__class__.__name__} "
                f"{getattr(resource, 'pk', '')} for user {getattr(subject, 'pk', None)}"
            )
            raise Forbidden(message or f"Not allowed to {action.replace('_', ' ')} this resource")


access_policy = AccessPolicy()
