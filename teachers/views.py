import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.http import JsonResponse

from accounts.auth import token_required, staff_required, require_role
from accounts.forms import AccountForm
from accounts.models import Role
from core.api import api_view, parse_json_body, bind_form, validate_form, get_object_or_error

from .forms import TeacherForm
from .models import Teacher

logger = logging.getLogger(__name__)
User = get_user_model()

TEACHER_FIELDS = {
    'title': 'title',
    'firstName': 'first_name',
    'middleName': 'middle_name',
    'lastName': 'last_name',
    'gender': 'gender',
    'dateOfBirth': 'date_of_birth',
    'staffId': 'staff_id',
    'status': 'status',
    'employmentDate': 'employment_date',
    'phoneNumber': 'phone_number',
    'email': 'email',
}


@api_view(['GET', 'POST'])
@token_required
@staff_required
def teacher_list(request, auth):
    """
    List teachers, or create one (Admin). When ``password`` is sent a login
    is created for the teacher's ``email`` in the same transaction.
    """
    if request.method == 'GET':
        teachers = Teacher.objects.all()
        status = request.GET.get('status')
        if status:
            teachers = teachers.filter(status=status)
        return JsonResponse({'teachers': [teacher.to_dict() for teacher in teachers]})

    require_role(auth, Role.ADMIN)

    payload = parse_json_body(request)
    form = bind_form(TeacherForm, payload, TEACHER_FIELDS)
    validate_form(form)

    account_form = None
    if 'password' in payload:
        account_form = AccountForm({'email': payload.get('email'), 'password': payload['password']})
        validate_form(account_form)

    with transaction.atomic():
        teacher = form.save(commit=False)
        if account_form is not None:
            teacher.user = account_form.create_user(
                User.objects.create_teacher,
                first_name=teacher.first_name, last_name=teacher.last_name,
            )
        teacher.save()

    logger.info(f"Teacher {teacher} created by {auth.user}")
    return JsonResponse(teacher.to_dict(), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
@staff_required
def teacher_detail(request, pk, auth):
    teacher = get_object_or_error(Teacher, 'Teacher not found', pk=pk)

    if request.method == 'GET':
        data = teacher.to_dict()
        data['classes'] = [c.to_dict() for c in teacher.assigned_classes.all()]
        data['subjects'] = [
            {'classId': a.class_assigned_id, 'className': a.class_assigned.name, 'subject': a.subject.name}
            for a in teacher.subject_assignments.select_related('class_assigned', 'subject')
        ]
        return JsonResponse(data)

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        # Class and subject assignments fall back to no teacher
        with transaction.atomic():
            if teacher.user is not None:
                teacher.user.delete()
            teacher.delete()
        logger.info(f"Teacher {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Teacher deleted'})

    form = bind_form(TeacherForm, parse_json_body(request), TEACHER_FIELDS, instance=teacher)
    validate_form(form)
    teacher = form.save()
    return JsonResponse(teacher.to_dict())
