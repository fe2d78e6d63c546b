"""
Helpers shared by the JSON API views.

Views raise ApiError subclasses for the expected failures (bad input, missing
objects, auth); the api_view decorator turns them into JSON error bodies and
maps storage failures to a logged 500.
"""
import json
import logging
from functools import wraps

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status = 400
    default_message = 'Bad request'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class BadRequest(ApiError):
    status = 400


class Unauthorized(ApiError):
    status = 401
    default_message = 'Unauthorized'


class Forbidden(ApiError):
    status = 403
    default_message = 'Forbidden'


class NotFound(ApiError):
    status = 404
    default_message = 'Not found'


def json_error(message, status, details=None):
    body = {'error': message}
    if details:
        body['details'] = details
    return JsonResponse(body, status=status)


def api_view(methods):
    """
    Restrict a JSON view to the given HTTP methods and map errors to JSON.

    Usage:
        @api_view(['GET', 'POST'])
        @token_required
        def my_view(request, auth):
            ...
    """
    allowed = [m.upper() for m in methods]

    def decorator(view_func):
        @csrf_exempt
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.method not in allowed:
                response = json_error('Method not allowed', 405)
                response['Allow'] = ', '.join(allowed)
                return response
            try:
                return view_func(request, *args, **kwargs)
            except ApiError as e:
                return json_error(e.message, e.status, e.details)
            except DatabaseError:
                logger.exception(f'Storage error in {view_func.__name__}')
                return json_error('Something went wrong while processing the request', 500)
        return wrapper
    return decorator


def parse_json_body(request):
    """Decode a JSON object body or raise BadRequest."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequest('Invalid JSON')
    if not isinstance(payload, dict):
        raise BadRequest('Expected a JSON object')
    return payload


def get_object_or_error(klass, message, **lookup):
    """JSON flavour of get_object_or_404; accepts a model or a queryset."""
    if hasattr(klass, '_default_manager'):
        queryset = klass._default_manager.all()
    else:
        queryset = klass
    try:
        return queryset.get(**lookup)
    except (queryset.model.DoesNotExist, ValueError, ValidationError):
        raise NotFound(message)


def form_errors(form):
    """Flatten a bound form's errors into a JSON-serialisable dict."""
    return {
        field: [str(message) for message in messages]
        for field, messages in form.errors.items()
    }


def validate_form(form):
    """Return cleaned data of a valid form or raise BadRequest with details."""
    if not form.is_valid():
        raise BadRequest('Validation failed', details=form_errors(form))
    return form.cleaned_data


def require_param(request, name, message=None):
    value = request.GET.get(name)
    if not value:
        raise BadRequest(message or f'{name} is required')
    return value


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def ratelimit(rate='100/h'):
    """
    Simple cache-based, per-IP rate limiter.

    Args:
        rate: Format "number/period" where period is s/m/h/d (second/minute/hour/day)

    Usage:
        @ratelimit(rate='20/m')
        def my_view(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            try:
                limit, period = rate.split('/')
                limit = int(limit)
                period_seconds = {
                    's': 1, 'm': 60, 'h': 3600, 'd': 86400
                }.get(period, 3600)
            except (ValueError, AttributeError):
                limit, period_seconds = 100, 3600  # Default: 100/hour

            cache_key = f"ratelimit:{view_func.__name__}:ip:{get_client_ip(request)}"

            # Atomically create the key if it doesn't exist
            if not cache.add(cache_key, 1, period_seconds):
                try:
                    current = cache.incr(cache_key)
                except ValueError:
                    # Key expired between add and incr, recreate
                    cache.set(cache_key, 1, period_seconds)
                    current = 1

                if current > limit:
                    logger.warning(f"Rate limit exceeded for {cache_key}")
                    return json_error('Too many requests. Please try again later.', 429)

            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator


def bind_form(form_class, payload, field_map, instance=None):
    """
    Bind a ModelForm from a camelCase JSON payload.

    ``field_map`` maps JSON keys to form field names. When updating, fields
    absent from the payload keep the instance's current values.
    """
    data = {}
    if instance is not None:
        data.update(model_to_dict(instance, fields=list(field_map.values())))
    for key, field in field_map.items():
        if key in payload:
            data[field] = payload[key]
    return form_class(data, instance=instance)
