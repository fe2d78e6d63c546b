import logging

from django.http import JsonResponse

from accounts.auth import token_required, require_role
from accounts.models import Role
from core.api import api_view, parse_json_body, bind_form, validate_form, get_object_or_error

from ..forms import SubjectForm
from ..models import Subject

logger = logging.getLogger(__name__)

SUBJECT_FIELDS = {
    'name': 'name',
    'shortName': 'short_name',
    'isCore': 'is_core',
    'isActive': 'is_active',
}


@api_view(['GET', 'POST'])
@token_required
def subject_list(request, auth):
    if request.method == 'GET':
        subjects = Subject.objects.all()
        if request.GET.get('active') == '1':
            subjects = subjects.filter(is_active=True)
        return JsonResponse({'subjects': [subject.to_dict() for subject in subjects]})

    require_role(auth, Role.ADMIN)
    form = bind_form(SubjectForm, parse_json_body(request), SUBJECT_FIELDS)
    validate_form(form)
    subject = form.save()
    logger.info(f"Subject {subject} created by {auth.user}")
    return JsonResponse(subject.to_dict(), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
def subject_detail(request, pk, auth):
    subject = get_object_or_error(Subject, 'Subject not found', pk=pk)

    if request.method == 'GET':
        return JsonResponse(subject.to_dict())

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        # Allocations and the subject's exams go with it
        subject.delete()
        logger.info(f"Subject {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Subject deleted'})

    form = bind_form(SubjectForm, parse_json_body(request), SUBJECT_FIELDS, instance=subject)
    validate_form(form)
    subject = form.save()
    return JsonResponse(subject.to_dict())
