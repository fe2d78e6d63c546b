"""Exams and marks entry."""
import logging

from django.db import transaction
from django.http import JsonResponse
from django.utils import timezone

from accounts.auth import token_required, staff_required, require_role
from accounts.models import Role
from academics.views.base import ensure_class_access
from core.api import (
    api_view, parse_json_body, bind_form, validate_form, form_errors, get_object_or_error, BadRequest,
)
from students.models import Student

from .. import config
from ..forms import ExamForm, ExamResultForm, ExamFilterForm
from ..models import Exam, ExamResult

logger = logging.getLogger(__name__)

EXAM_FIELDS = {
    'termId': 'term',
    'classId': 'class_assigned',
    'subjectId': 'subject',
    'examType': 'exam_type',
    'name': 'name',
    'totalMarks': 'total_marks',
    'date': 'date',
}


@api_view(['GET', 'POST'])
@token_required
@staff_required
def exam_list(request, auth):
    """
    GET  ?termId=&classId=&subjectId=&examType=  -> matching exams
    POST (Admin) -> create an exam
    """
    if request.method == 'GET':
        filters = validate_form(ExamFilterForm({
            'term_id': request.GET.get('termId'),
            'class_id': request.GET.get('classId'),
            'subject_id': request.GET.get('subjectId'),
            'exam_type': request.GET.get('examType', ''),
        }))
        exams = Exam.objects.select_related('subject', 'class_assigned')
        for field in ('term_id', 'class_id', 'subject_id'):
            if filters[field] is not None:
                lookup = 'class_assigned_id' if field == 'class_id' else field
                exams = exams.filter(**{lookup: filters[field]})
        if filters['exam_type']:
            exams = exams.filter(exam_type=filters['exam_type'])
        return JsonResponse({'exams': [exam.to_dict() for exam in exams]})

    require_role(auth, Role.ADMIN)
    form = bind_form(ExamForm, parse_json_body(request), EXAM_FIELDS)
    validate_form(form)
    exam = form.save()
    logger.info(f"Exam {exam} created by {auth.user}")
    return JsonResponse(exam.to_dict(), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
@staff_required
def exam_detail(request, pk, auth):
    exam = get_object_or_error(Exam.objects.select_related('subject', 'class_assigned'), 'Exam not found', pk=pk)

    if request.method == 'GET':
        return JsonResponse(exam.to_dict())

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        exam.delete()
        logger.info(f"Exam {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Exam deleted'})

    form = bind_form(ExamForm, parse_json_body(request), EXAM_FIELDS, instance=exam)
    validate_form(form)
    exam = form.save()
    return JsonResponse(exam.to_dict())


@api_view(['GET', 'POST'])
@token_required
@staff_required
def exam_marks(request, pk, auth):
    """
    GET  -> every student in the exam's class with their mark (null when none)
    POST {results: [{studentId, marks, grade?, remarks?}]} -> upsert marks
    """
    exam = get_object_or_error(
        Exam.objects.select_related('subject', 'class_assigned', 'term'), 'Exam not found', pk=pk
    )
    ensure_class_access(auth, exam.class_assigned, subject=exam.subject)

    students = list(
        Student.objects.filter(current_class=exam.class_assigned, status=Student.Status.ACTIVE)
        .order_by('last_name', 'first_name')
    )

    if request.method == 'POST':
        save_marks(auth, exam, students, parse_json_body(request).get('results'))

    results = {r.student_id: r for r in exam.results.all()}
    return JsonResponse({
        'exam': exam.to_dict(),
        'results': [
            {
                'studentId': student.pk,
                'name': student.full_name,
                'rollNum': student.admission_number,
                'marks': float(results[student.pk].marks_obtained) if student.pk in results else None,
                'grade': results[student.pk].grade if student.pk in results else '',
                'remarks': results[student.pk].remarks if student.pk in results else '',
            }
            for student in students
        ],
    })


def save_marks(auth, exam, students, entries):
    if not isinstance(entries, list) or not entries:
        raise BadRequest('results must be a non-empty list')

    roster = {student.pk for student in students}
    existing = {r.student_id: r for r in exam.results.all()}

    pending = {}
    errors = {}
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            errors[f'results[{index}]'] = {'__all__': ['Each result must be an object.']}
            continue

        form = ExamResultForm({
            'student_id': entry.get('studentId'),
            'marks_obtained': entry.get('marks'),
            'grade': entry.get('grade', ''),
            'remarks': entry.get('remarks', ''),
        }, instance=ExamResult(exam=exam), exam=exam, roster=roster)
        if not form.is_valid():
            errors[f'results[{index}]'] = form_errors(form)
            continue

        data = form.cleaned_data
        result = existing.get(data['student_id'])
        if result is None:
            result = form.instance
            result.student_id = data['student_id']
        else:
            result.marks_obtained = data['marks_obtained']
            result.grade = data['grade']
            result.remarks = data['remarks']

        # Repeated rows for one student: the last one wins
        pending[data['student_id']] = result

    if errors:
        raise BadRequest('Validation failed', details=errors)

    now = timezone.now()
    results_to_create = [r for r in pending.values() if r.pk is None]
    results_to_update = [r for r in pending.values() if r.pk is not None]
    for result in results_to_update:
        result.updated_at = now

    with transaction.atomic():
        if results_to_create:
            ExamResult.objects.bulk_create(results_to_create, batch_size=config.BULK_UPDATE_BATCH_SIZE)
        if results_to_update:
            ExamResult.objects.bulk_update(
                results_to_update,
                ['marks_obtained', 'grade', 'remarks', 'updated_at'],
                batch_size=config.BULK_UPDATE_BATCH_SIZE,
            )

    logger.info(
        f"Marks for {exam}: {len(results_to_create)} created, "
        f"{len(results_to_update)} updated by {auth.user}"
    )
