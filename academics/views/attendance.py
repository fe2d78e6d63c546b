"""Daily attendance registers."""
import logging

from django.db import transaction
from django.http import JsonResponse

from accounts.auth import token_required, staff_required
from core.api import (
    api_view, parse_json_body, validate_form, get_object_or_error, form_errors, BadRequest,
)
from students.models import Student

from ..forms import AttendanceQueryForm, AttendanceEntryForm
from ..models import Class, AttendanceSession, AttendanceRecord
from .base import ensure_class_access

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@token_required
@staff_required
def attendance(request, auth):
    """
    GET  ?classId=&date=  -> the class register for that date
    POST {classId, date, records: [{studentId, status, remarks}]} -> upsert the register
    """
    if request.method == 'GET':
        source = {'class_id': request.GET.get('classId'), 'date': request.GET.get('date')}
        payload = None
    else:
        payload = parse_json_body(request)
        source = {'class_id': payload.get('classId'), 'date': payload.get('date')}

    query = validate_form(AttendanceQueryForm(source))
    class_obj = get_object_or_error(Class, 'Class not found', pk=query['class_id'])
    ensure_class_access(auth, class_obj)

    students = list(class_obj.students.filter(status=Student.Status.ACTIVE))

    if request.method == 'POST':
        save_register(auth, class_obj, query['date'], students, payload.get('records'))

    session = AttendanceSession.objects.filter(class_assigned=class_obj, date=query['date']).first()
    records = {r.student_id: r for r in session.records.all()} if session else {}

    return JsonResponse({
        'class': class_obj.to_dict(),
        'date': query['date'].isoformat(),
        'records': [
            {
                'studentId': student.pk,
                'name': student.full_name,
                'status': records[student.pk].status if student.pk in records else None,
                'remarks': records[student.pk].remarks if student.pk in records else '',
            }
            for student in students
        ],
    })


def save_register(auth, class_obj, date, students, entries):
    if not isinstance(entries, list) or not entries:
        raise BadRequest('records must be a non-empty list')

    roster = {student.pk for student in students}
    cleaned = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise BadRequest(f'records[{index}] must be an object')
        form = AttendanceEntryForm({
            'student_id': entry.get('studentId'),
            'status': entry.get('status'),
            'remarks': entry.get('remarks', ''),
        })
        if not form.is_valid():
            raise BadRequest('Validation failed', details={f'records[{index}]': form_errors(form)})
        data = form.cleaned_data
        if data['student_id'] not in roster:
            raise BadRequest(f"Student {data['student_id']} is not in {class_obj}")
        cleaned[data['student_id']] = data

    with transaction.atomic():
        session, _ = AttendanceSession.objects.get_or_create(
            class_assigned=class_obj,
            date=date,
            defaults={'created_by': auth.teacher}
        )
        existing_records = {
            r.student_id: r
            for r in AttendanceRecord.objects.filter(session=session, student_id__in=list(cleaned))
        }

        records_to_create = []
        records_to_update = []
        for student_id, data in cleaned.items():
            record = existing_records.get(student_id)
            if record is None:
                records_to_create.append(AttendanceRecord(
                    session=session,
                    student_id=student_id,
                    status=data['status'],
                    remarks=data['remarks'],
                ))
            elif record.status != data['status'] or record.remarks != data['remarks']:
                record.status = data['status']
                record.remarks = data['remarks']
                records_to_update.append(record)

        if records_to_create:
            AttendanceRecord.objects.bulk_create(records_to_create)
        if records_to_update:
            AttendanceRecord.objects.bulk_update(records_to_update, ['status', 'remarks'])

    logger.info(
        f"Attendance for {class_obj} on {date}: {len(records_to_create)} created, "
        f"{len(records_to_update)} updated by {auth.user}"
    )
