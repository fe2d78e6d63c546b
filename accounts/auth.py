"""
Bearer token authentication for the JSON API.

A verified token produces an AuthContext that is handed to the view as the
``auth`` keyword argument, so handlers never reach for ambient request state
to find out who is calling.
"""
import logging
from functools import wraps

from django.utils import timezone

from core.api import Unauthorized, Forbidden
from .models import ApiToken, Role

logger = logging.getLogger(__name__)


class AuthContext:
    """Who is calling, as established from the presented bearer token."""

    def __init__(self, user, token):
        self.user = user
        self.token = token

    @property
    def role(self):
        return self.user.role

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def has_role(self, *roles):
        return self.role in roles

    @property
    def teacher(self):
        """Teacher profile of the caller, if any."""
        return getattr(self.user, 'teacher_profile', None)

    @property
    def student(self):
        """Student profile of the caller, if any."""
        return getattr(self.user, 'student_profile', None)

    @property
    def guardian(self):
        """Guardian (parent) profile of the caller, if any."""
        return getattr(self.user, 'guardian_profile', None)

    def to_dict(self):
        return {
            'id': self.user.pk,
            'email': self.user.email,
            'name': self.user.get_full_name() or self.user.email,
            'role': self.role,
        }


def get_bearer_key(request):
    """Extract the key from an ``Authorization: Bearer <key>`` header."""
    header = request.headers.get('Authorization', '')
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None
    return parts[1]


def authenticate_request(request):
    """
    Verify the request's bearer token against the database.

    Returns:
        AuthContext for the token's user

    Raises:
        Unauthorized: no token, unknown token, revoked or expired token
    """
    key = get_bearer_key(request)
    if not key:
        raise Unauthorized('Unauthorized')

    token = ApiToken.objects.active().select_related('user').filter(key=key).first()
    if token is None:
        logger.warning(f"Rejected API token {key[:8]}... for {request.path}")
        raise Unauthorized('Invalid token')

    ApiToken.objects.filter(pk=token.pk).update(last_used_at=timezone.now())
    return AuthContext(token.user, token)


def issue_token(user):
    """Create a new bearer token for a user who just authenticated."""
    return ApiToken.objects.create(user=user)


def token_required(view_func):
    """Authenticate the bearer token and pass the AuthContext as ``auth``."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        auth = authenticate_request(request)
        return view_func(request, *args, auth=auth, **kwargs)
    return wrapper


def require_role(auth, *roles, action='perform this action'):
    """Raise Forbidden unless the caller holds one of ``roles``."""
    if not auth.has_role(*roles):
        logger.warning(f"{auth.user} ({auth.role}) denied: {action}")
        raise Forbidden('You do not have permission to perform this action')


def role_required(*roles):
    """
    Require the authenticated caller to hold one of ``roles``.
    Must sit below ``token_required``.
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            require_role(kwargs['auth'], *roles, action=f'{request.method} {request.path}')
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


admin_required = role_required(Role.ADMIN)
staff_required = role_required(Role.ADMIN, Role.TEACHER)
