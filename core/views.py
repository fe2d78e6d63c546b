import logging

from django.http import JsonResponse

from accounts.auth import token_required, require_role
from accounts.models import Role
from core.api import (
    api_view, parse_json_body, bind_form, validate_form, get_object_or_error, BadRequest,
)
from .forms import AcademicYearForm, TermForm
from .models import AcademicYear, Term

logger = logging.getLogger(__name__)

ACADEMIC_YEAR_FIELDS = {
    'name': 'name',
    'startDate': 'start_date',
    'endDate': 'end_date',
    'isCurrent': 'is_current',
}

TERM_FIELDS = {
    'academicYearId': 'academic_year',
    'name': 'name',
    'termNumber': 'term_number',
    'startDate': 'start_date',
    'endDate': 'end_date',
    'nextTermStarts': 'next_term_starts',
    'nextTermEnds': 'next_term_ends',
    'isCurrent': 'is_current',
}


def academic_year_to_dict(academic_year):
    return {
        'id': academic_year.pk,
        'name': academic_year.name,
        'startDate': academic_year.start_date.isoformat(),
        'endDate': academic_year.end_date.isoformat(),
        'isCurrent': academic_year.is_current,
    }


@api_view(['GET', 'POST'])
@token_required
def academic_years(request, auth):
    if request.method == 'GET':
        data = [academic_year_to_dict(y) for y in AcademicYear.objects.all()]
        return JsonResponse({'academicYears': data})

    require_role(auth, Role.ADMIN)
    form = bind_form(AcademicYearForm, parse_json_body(request), ACADEMIC_YEAR_FIELDS)
    validate_form(form)
    academic_year = form.save()
    logger.info(f"Academic year {academic_year} created by {auth.user}")
    return JsonResponse(academic_year_to_dict(academic_year), status=201)


@api_view(['GET', 'POST'])
@token_required
def term_list(request, auth):
    """List terms, newest academic year first, or create one (Admin)."""
    if request.method == 'GET':
        terms = Term.objects.select_related('academic_year').order_by(
            '-academic_year__start_date', 'term_number'
        )
        return JsonResponse({'terms': [term.to_dict() for term in terms]})

    require_role(auth, Role.ADMIN)

    payload = parse_json_body(request)
    if 'academicYearId' not in payload:
        current_year = AcademicYear.get_current()
        if current_year is None:
            raise BadRequest('academicYearId is required when no academic year is current')
        payload['academicYearId'] = current_year.pk

    form = bind_form(TermForm, payload, TERM_FIELDS)
    validate_form(form)
    term = form.save()
    logger.info(f"Term {term} created by {auth.user}")
    return JsonResponse(term.to_dict(), status=201)


@api_view(['GET', 'PUT', 'DELETE'])
@token_required
def term_detail(request, pk, auth):
    term = get_object_or_error(Term.objects.select_related('academic_year'), 'Term not found', pk=pk)

    if request.method == 'GET':
        return JsonResponse(term.to_dict())

    require_role(auth, Role.ADMIN)

    if request.method == 'DELETE':
        term.delete()
        logger.info(f"Term {pk} deleted by {auth.user}")
        return JsonResponse({'message': 'Term deleted'})

    form = bind_form(TermForm, parse_json_body(request), TERM_FIELDS, instance=term)
    validate_form(form)
    term = form.save()
    return JsonResponse(term.to_dict())
