"""Access helpers for class-scoped API views."""
import logging

from accounts.models import Role
from core.api import Forbidden

logger = logging.getLogger(__name__)


def get_teacher_or_forbid(auth):
    """Teacher profile of a Teacher caller; Forbidden when the account has none."""
    teacher = auth.teacher
    if teacher is None:
        logger.warning(f"{auth.user} has the Teacher role but no teacher profile")
        raise Forbidden('No teacher profile is linked to this account')
    return teacher


def ensure_class_access(auth, class_obj, subject=None, class_teacher_only=False):
    """
    Admins may act on any class. Teachers must be the class teacher, or
    (unless ``class_teacher_only``) teach ``subject`` (any subject when None)
    in the class.
    """
    if auth.is_admin:
        return
    if not auth.has_role(Role.TEACHER):
        raise Forbidden('You do not have permission to perform this action')

    teacher = get_teacher_or_forbid(auth)
    if class_teacher_only:
        allowed = class_obj.class_teacher_id == teacher.pk
    else:
        allowed = teacher.teaches(class_obj, subject)
    if not allowed:
        logger.warning(f"{auth.user} is not assigned to class {class_obj}")
        raise Forbidden('You are not assigned to this class')
