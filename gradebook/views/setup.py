"""Grading scale and comment band setup."""
import logging

from django.http import JsonResponse

from accounts.auth import token_required, require_role
from accounts.models import Role
from academics.views.base import get_teacher_or_forbid
from core.api import (
    api_view, parse_json_body, bind_form, validate_form, get_object_or_error, Forbidden, NotFound,
)

from ..forms import GradeScaleForm, CommentBandForm
from ..models import GradeScale, CommentBand

logger = logging.getLogger(__name__)

BAND_FIELDS = {
    'from': 'min_percentage',
    'to': 'max_percentage',
}

GRADING_FIELDS = dict(BAND_FIELDS, grade='grade_label', interpretation='interpretation')
COMMENT_FIELDS = dict(BAND_FIELDS, comment='comment')

COMMENT_KINDS = {
    'class-teacher': CommentBand.Kind.CLASS_TEACHER,
    'head-teacher': CommentBand.Kind.HEAD_TEACHER,
}


# ============ Grading Scale ============

@api_view(['GET', 'POST'])
@token_required
def grading_list(request, auth):
    """List grading bands (highest first) or add one (Admin)."""
    if request.method == 'GET':
        scales = GradeScale.objects.order_by('-min_percentage')
        return JsonResponse({'gradings': [scale.to_dict() for scale in scales]})

    require_role(auth, Role.ADMIN)
    form = bind_form(GradeScaleForm, parse_json_body(request), GRADING_FIELDS)
    validate_form(form)
    scale = form.save()
    logger.info(f"Grade {scale} added by {auth.user}")
    return JsonResponse(scale.to_dict(), status=201)


@api_view(['PUT', 'DELETE'])
@token_required
def grading_detail(request, pk, auth):
    require_role(auth, Role.ADMIN)
    scale = get_object_or_error(GradeScale, 'Grading not found', pk=pk)

    if request.method == 'DELETE':
        scale.delete()
        logger.info(f"Grade {scale} deleted by {auth.user}")
        return JsonResponse({'message': 'Grading deleted'})

    form = bind_form(GradeScaleForm, parse_json_body(request), GRADING_FIELDS, instance=scale)
    validate_form(form)
    scale = form.save()
    return JsonResponse(scale.to_dict())


# ============ Comment Bands ============

def get_comment_kind(kind):
    if kind not in COMMENT_KINDS:
        raise NotFound('Unknown comment type')
    return COMMENT_KINDS[kind]


def ensure_comment_write(auth, kind, band=None):
    """
    Admins write both kinds. Teachers write class-teacher remarks only, and
    only edit the ones they wrote.

    Returns:
        Teacher authoring the change, or None for an admin
    """
    if auth.is_admin:
        return auth.teacher
    require_role(auth, Role.TEACHER)
    if kind != CommentBand.Kind.CLASS_TEACHER:
        raise Forbidden('Only administrators can manage head teacher comments')

    teacher = get_teacher_or_forbid(auth)
    if band is not None and band.teacher_id != teacher.pk:
        raise Forbidden('You can only change comments you wrote')
    return teacher


@api_view(['GET', 'POST'])
@token_required
def comment_list(request, kind, auth):
    kind = get_comment_kind(kind)

    if request.method == 'GET':
        bands = CommentBand.objects.filter(kind=kind).order_by('-min_percentage')
        return JsonResponse({'comments': [band.to_dict() for band in bands]})

    teacher = ensure_comment_write(auth, kind)
    form = bind_form(
        CommentBandForm, parse_json_body(request), COMMENT_FIELDS,
        instance=CommentBand(kind=kind, teacher=teacher),
    )
    validate_form(form)
    band = form.save()
    logger.info(f"{band} added by {auth.user}")
    return JsonResponse(band.to_dict(), status=201)


@api_view(['PUT', 'DELETE'])
@token_required
def comment_detail(request, kind, pk, auth):
    kind = get_comment_kind(kind)
    band = get_object_or_error(CommentBand.objects.filter(kind=kind), 'Comment not found', pk=pk)
    ensure_comment_write(auth, kind, band)

    if request.method == 'DELETE':
        band.delete()
        logger.info(f"{band} deleted by {auth.user}")
        return JsonResponse({'message': 'Comment deleted'})

    form = bind_form(CommentBandForm, parse_json_body(request), COMMENT_FIELDS, instance=band)
    validate_form(form)
    band = form.save()
    return JsonResponse(band.to_dict())
