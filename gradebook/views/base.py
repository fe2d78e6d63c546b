"""Access rules and request parsing shared by the gradebook views."""
import logging

from accounts.models import Role
from academics.views.base import ensure_class_access
from core.api import BadRequest, Forbidden, get_object_or_error, require_param
from core.models import Term

from ..report_cards import REPORT_TYPES, DEFAULT_REPORT_TYPE

logger = logging.getLogger(__name__)


def ensure_report_access(auth, student):
    """
    Admins and the student's teachers may read any report card in their
    classes; a Student only their own; a Parent only their children's.
    """
    if auth.is_admin:
        return

    if auth.has_role(Role.TEACHER):
        if student.current_class is None:
            raise Forbidden('Student is not assigned to a class')
        ensure_class_access(auth, student.current_class)
        return

    if auth.has_role(Role.STUDENT):
        profile = auth.student
        if profile is not None and profile.pk == student.pk:
            return
    elif auth.has_role(Role.PARENT):
        guardian = auth.guardian
        if guardian is not None and guardian.students.filter(pk=student.pk).exists():
            return

    logger.warning(f"{auth.user} ({auth.role}) denied report card of student {student.pk}")
    raise Forbidden('You do not have permission to view this report card')


def get_report_params(request):
    """
    Parse ``termId`` and ``reportType`` from the query string.

    Returns:
        tuple: (Term, report type)
    """
    term_id = require_param(request, 'termId', 'Term ID is required')
    report_type = request.GET.get('reportType') or request.GET.get('type') or DEFAULT_REPORT_TYPE
    if report_type not in REPORT_TYPES:
        raise BadRequest(f"reportType must be one of: {', '.join(REPORT_TYPES)}")

    term = get_object_or_error(Term.objects.select_related('academic_year'), 'Term not found', pk=term_id)
    return term, report_type
