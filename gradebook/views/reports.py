"""Report cards and the class broadsheet export."""
import logging

from django.http import HttpResponse, JsonResponse

from accounts.auth import token_required, staff_required, admin_required
from academics.models import Class
from academics.views.base import ensure_class_access
from core.api import api_view, get_object_or_error
from students.models import Student

from ..utils import (
    build_student_report_card, build_class_report_cards, render_broadsheet,
)
from .base import ensure_report_access, get_report_params

logger = logging.getLogger(__name__)


@api_view(['GET'])
@token_required
def student_report_card(request, pk, auth):
    """GET ?termId=&reportType= -> one student's report card."""
    term, report_type = get_report_params(request)
    student = get_object_or_error(
        Student.objects.select_related('current_class'), 'Student not found', pk=pk
    )
    ensure_report_access(auth, student)

    return JsonResponse(build_student_report_card(student, term, report_type))


@api_view(['GET'])
@token_required
@staff_required
def class_report_cards(request, pk, auth):
    """Every active student's report card plus their class position."""
    term, report_type = get_report_params(request)
    class_obj = get_object_or_error(Class.objects.select_related('class_teacher'), 'Class not found', pk=pk)
    ensure_class_access(auth, class_obj, class_teacher_only=True)

    builder, cards = build_class_report_cards(class_obj, term, report_type)
    return JsonResponse({
        'class': class_obj.to_dict(),
        'term': builder.term_info(),
        'school': builder.school_info(),
        'reportType': report_type,
        'gradingScale': builder.grading_scale(),
        'reportCards': cards,
    })


@api_view(['GET'])
@token_required
@admin_required
def class_report_export(request, pk, auth):
    """
    Excel broadsheet for a class. With ``async=1`` the workbook is built by a
    Celery worker and the response carries the job id to poll.
    """
    term, report_type = get_report_params(request)
    class_obj = get_object_or_error(Class, 'Class not found', pk=pk)

    if request.GET.get('async') == '1':
        from ..tasks import export_class_broadsheet
        job = export_class_broadsheet.delay(class_obj.pk, term.pk, report_type, request.tenant.schema_name)
        logger.info(f"Queued broadsheet export {job.id} for {class_obj} by {auth.user}")
        return JsonResponse({'jobId': job.id, 'status': 'queued'}, status=202)

    filename, content = render_broadsheet(class_obj, term, report_type)
    response = HttpResponse(
        content,
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
