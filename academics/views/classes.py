import logging

from django.db import transaction
from django.db.models import Q, ProtectedError
from django.http import JsonResponse

from accounts.auth import token_required, staff_required, require_role
from accounts.models import Role
from core.api import (
    api_view, parse_json_body, bind_form, validate_form, get_object_or_error, BadRequest,
)
from students.models import Student

from ..forms import ClassForm, ClassSubjectForm
from ..models import Class, ClassSubject
from .base import get_teacher_or_forbid, ensure_class_access

logger = logging.getLogger(__name__)

CLASS_FIELDS = {
    'levelType': 'level_type',
    'levelNumber': 'level_number',
    'section': 'section',
    'classTeacherId': 'class_teacher',
    'isActive': 'is_active',
}

ALLOCATION_FIELDS = {
    'subjectId': 'subject',
    'teacherId': 'teacher',
}


def class_to_detail(class_obj):
    data = class_obj.to_dict()
    data.update({
        'levelType': class_obj.level_type,
        'levelNumber': class_obj.level_number,
        'section': class_obj.section,
        'isActive': class_obj.is_active,
        'subjects': [
            allocation.to_dict()
            for allocation in class_obj.subjects.select_related('subject', 'teacher')
        ],
    })
    return data


@api_view(['GET', 'POST'])
@token_required
@staff_required
def class_list(request, auth):
    """
    Active classes; teachers only see the classes they are assigned to.
    POST creates a class (Admin).
    """
    if request.method == 'POST':
        require_role(auth, Role.ADMIN)
        form = bind_form(ClassForm, parse_json_body(request), CLASS_FIELDS)
        validate_form(form)
        class_obj = form.save()
        logger.info(f"Class {class_obj} created by {auth.user}")
        return JsonResponse(class_to_detail(class_obj), status=201)

    classes = Class.objects.filter(is_active=True).select_related('class_teacher')
    if not auth.is_admin:
        teacher = get_teacher_or_forbid(auth)
        classes = classes.filter(
            Q(class_teacher=teacher) | Q(subjects__teacher=teacher)
        ).distinct()

    data = []
    for class_obj in classes:
        item = class_obj.to_dict()
        item['studentCount'] = class_obj.students.filter(status=Student.Status.ACTIVE).count()
        data.append(item)
    return JsonResponse({'classes': data})


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
@staff_required
def class_detail(request, pk, auth):
    class_obj = get_object_or_error(Class.objects.select_related('class_teacher'), 'Class not found', pk=pk)

    if request.method == 'GET':
        ensure_class_access(auth, class_obj)
        return JsonResponse(class_to_detail(class_obj))

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        try:
            class_obj.delete()
        except ProtectedError:
            raise BadRequest('Class still has students; move them or deactivate the class')
        logger.info(f"Class {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Class deleted'})

    form = bind_form(ClassForm, parse_json_body(request), CLASS_FIELDS, instance=class_obj)
    validate_form(form)
    class_obj = form.save()
    return JsonResponse(class_to_detail(class_obj))


@api_view(['GET', 'POST'])
@token_required
@staff_required
def class_subjects(request, pk, auth):
    """
    Subject allocations of a class. POST allocates ``subjectId`` with an
    optional ``teacherId``; allocating a subject again replaces its teacher.
    """
    class_obj = get_object_or_error(Class, 'Class not found', pk=pk)

    if request.method == 'GET':
        ensure_class_access(auth, class_obj)
        allocations = class_obj.subjects.select_related('subject', 'teacher')
        return JsonResponse({
            'class': class_obj.to_dict(),
            'subjects': [allocation.to_dict() for allocation in allocations],
        })

    require_role(auth, Role.ADMIN)
    payload = parse_json_body(request)

    subject_id = str(payload.get('subjectId', ''))
    with transaction.atomic():
        existing = None
        if subject_id.isdigit():
            existing = class_obj.subjects.select_for_update().filter(subject_id=subject_id).first()
        form = bind_form(
            ClassSubjectForm, payload, ALLOCATION_FIELDS,
            instance=existing or ClassSubject(class_assigned=class_obj),
        )
        validate_form(form)
        allocation = form.save()

    logger.info(f"{allocation} allocated to {allocation.teacher or 'no teacher'} by {auth.user}")
    return JsonResponse(allocation.to_dict(), status=200 if existing else 201)


@api_view(['DELETE'])
@token_required
@staff_required
def class_subject_detail(request, pk, subject_pk, auth):
    require_role(auth, Role.ADMIN)
    allocation = get_object_or_error(
        ClassSubject, 'Subject is not allocated to this class', class_assigned_id=pk, subject_id=subject_pk
    )
    allocation.delete()
    logger.info(f"Subject {subject_pk} removed from class {pk} by {auth.user}")
    return JsonResponse({'message': 'Subject allocation removed'})


@api_view(['GET'])
@token_required
@staff_required
def class_students(request, pk, auth):
    class_obj = get_object_or_error(Class, 'Class not found', pk=pk)
    ensure_class_access(auth, class_obj)

    students = class_obj.students.filter(status=Student.Status.ACTIVE).order_by('last_name', 'first_name')
    return JsonResponse({
        'class': class_obj.to_dict(),
        'students': [student.to_dict() for student in students],
    })
