import logging

from django.conf import settings
from django.contrib.auth import authenticate
from django.http import JsonResponse

from core.api import api_view, parse_json_body, ratelimit, validate_form, Unauthorized
from .auth import token_required, issue_token
from .forms import LoginForm

logger = logging.getLogger(__name__)


@api_view(['POST'])
@ratelimit(rate=settings.LOGIN_RATE_LIMIT)
def login(request):
    """Exchange email and password for a bearer token."""
    form = LoginForm(parse_json_body(request))
    data = validate_form(form)

    user = authenticate(request, username=data['email'], password=data['password'])
    if user is None:
        logger.warning(f"Failed API login for {data['email']}")
        raise Unauthorized(LoginForm.error_messages['invalid_login'])
    if user.role is None:
        raise Unauthorized('This account has no school role')

    token = issue_token(user)
    logger.info(f"Issued API token for {user.email} ({user.role})")

    return JsonResponse({
        'token': token.key,
        'expiresAt': token.expires_at.isoformat(),
        'user': {
            'id': user.pk,
            'email': user.email,
            'name': user.get_full_name() or user.email,
            'role': user.role,
        },
    })


@api_view(['POST'])
@token_required
def logout(request, auth):
    """Revoke the token used for this request."""
    auth.token.revoke()
    return JsonResponse({'message': 'Logged out'})


@api_view(['GET'])
@token_required
def me(request, auth):
    return JsonResponse({'user': auth.to_dict()})
