import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q
from django.http import JsonResponse

from accounts.auth import token_required, staff_required, admin_required, require_role
from accounts.forms import AccountForm
from accounts.models import Role
from academics.views.base import ensure_class_access, get_teacher_or_forbid
from core.api import (
    api_view, parse_json_body, bind_form, validate_form, get_object_or_error, BadRequest, Forbidden,
)

from .forms import StudentForm, GuardianForm, ConductForm
from .models import Student, Guardian

logger = logging.getLogger(__name__)
User = get_user_model()

STUDENT_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'otherNames': 'other_names',
    'dateOfBirth': 'date_of_birth',
    'gender': 'gender',
    'rollNum': 'admission_number',
    'admissionDate': 'admission_date',
    'classId': 'current_class',
    'status': 'status',
}

GUARDIAN_FIELDS = {
    'name': 'full_name',
    'phoneNumber': 'phone_number',
    'relationship': 'relationship',
    'studentIds': 'students',
}

CONDUCT_FIELDS = {
    'discipline': 'discipline',
    'timeManagement': 'time_management',
    'smartness': 'smartness',
    'attendanceRemarks': 'attendance_remarks',
}


def bind_account(payload, required=False):
    """AccountForm for the ``email``/``password`` keys; None when no login is requested."""
    if not required and 'password' not in payload:
        return None
    form = AccountForm({'email': payload.get('email'), 'password': payload.get('password')})
    validate_form(form)
    return form


def guardian_to_dict(guardian):
    return {
        'id': guardian.pk,
        'name': guardian.full_name,
        'email': guardian.user.email,
        'phoneNumber': guardian.phone_number,
        'relationship': guardian.relationship,
        'students': [student.to_dict() for student in guardian.students.all()],
    }


def ensure_student_access(auth, student):
    if student.current_class is not None:
        ensure_class_access(auth, student.current_class)
    elif not auth.is_admin:
        raise Forbidden('Student is not assigned to a class')


@api_view(['GET', 'POST'])
@token_required
@staff_required
def student_list(request, auth):
    """
    Students, optionally filtered by ``classId`` and ``status``; teachers only
    see the classes they are assigned to. POST enrols a student (Admin), with
    a login when ``email`` and ``password`` are sent.
    """
    if request.method == 'GET':
        students = Student.objects.select_related('current_class')
        class_id = request.GET.get('classId')
        if class_id:
            if not class_id.isdigit():
                raise BadRequest('classId must be a number')
            students = students.filter(current_class_id=class_id)
        status = request.GET.get('status')
        if status:
            students = students.filter(status=status)
        if not auth.is_admin:
            teacher = get_teacher_or_forbid(auth)
            students = students.filter(
                Q(current_class__class_teacher=teacher) | Q(current_class__subjects__teacher=teacher)
            ).distinct()
        return JsonResponse({'students': [student.to_dict() for student in students]})

    require_role(auth, Role.ADMIN)

    payload = parse_json_body(request)
    form = bind_form(StudentForm, payload, STUDENT_FIELDS)
    validate_form(form)
    account_form = bind_account(payload)

    with transaction.atomic():
        student = form.save(commit=False)
        if account_form is not None:
            student.user = account_form.create_user(
                User.objects.create_student,
                first_name=student.first_name, last_name=student.last_name,
            )
        student.save()

    logger.info(f"Student {student} enrolled by {auth.user}")
    return JsonResponse(student.to_dict(), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
@staff_required
def student_detail(request, pk, auth):
    student = get_object_or_error(Student.objects.select_related('current_class'), 'Student not found', pk=pk)

    if request.method == 'GET':
        ensure_student_access(auth, student)
        data = student.to_dict()
        data.update({
            'firstName': student.first_name,
            'lastName': student.last_name,
            'otherNames': student.other_names,
            'dateOfBirth': student.date_of_birth.isoformat() if student.date_of_birth else None,
            'admissionDate': student.admission_date.isoformat() if student.admission_date else None,
            'photo': student.photo_url,
            'conduct': student.conduct_to_dict(),
        })
        return JsonResponse(data)

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        # Exam results and attendance records go with the student
        with transaction.atomic():
            if student.user is not None:
                student.user.delete()
            student.delete()
        logger.info(f"Student {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Student deleted'})

    form = bind_form(StudentForm, parse_json_body(request), STUDENT_FIELDS, instance=student)
    validate_form(form)
    student = form.save()
    return JsonResponse(student.to_dict())


@api_view(['PUT'])
@token_required
@staff_required
def update_conduct(request, pk, auth):
    """Update any of the four conduct fields; omitted fields are kept."""
    student = get_object_or_error(Student.objects.select_related('current_class'), 'Student not found', pk=pk)
    ensure_student_access(auth, student)

    form = bind_form(ConductForm, parse_json_body(request), CONDUCT_FIELDS, instance=student)
    validate_form(form)
    student = form.save()
    logger.info(f"Conduct for {student} updated by {auth.user}")

    return JsonResponse({
        'student': student.to_dict(),
        'conduct': student.conduct_to_dict(),
    })


@api_view(['GET', 'POST'])
@token_required
@admin_required
def guardian_list(request, auth):
    """Parents and their children. A new parent always gets a login."""
    if request.method == 'GET':
        guardians = Guardian.objects.select_related('user').prefetch_related('students')
        return JsonResponse({'parents': [guardian_to_dict(g) for g in guardians]})

    payload = parse_json_body(request)
    form = bind_form(GuardianForm, payload, GUARDIAN_FIELDS)
    validate_form(form)
    account_form = bind_account(payload, required=True)

    with transaction.atomic():
        guardian = form.save(commit=False)
        guardian.user = account_form.create_user(User.objects.create_parent)
        guardian.save()
        form.save_m2m()

    logger.info(f"Parent {guardian} created by {auth.user}")
    return JsonResponse(guardian_to_dict(guardian), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
@admin_required
def guardian_detail(request, pk, auth):
    guardian = get_object_or_error(Guardian.objects.select_related('user'), 'Parent not found', pk=pk)

    if request.method == 'GET':
        return JsonResponse(guardian_to_dict(guardian))

    if request.method == 'DELETE':
        # Removing the login removes the profile with it
        guardian.user.delete()
        logger.info(f"Parent {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Parent deleted'})

    form = bind_form(GuardianForm, parse_json_body(request), GUARDIAN_FIELDS, instance=guardian)
    validate_form(form)
    guardian = form.save()
    return JsonResponse(guardian_to_dict(guardian))
