"""
Configuration settings for the gradebook app.

These values can be overridden in Django settings by prefixing with GRADEBOOK_.
For example, to change the grade used when no band matches:
    GRADEBOOK_FALLBACK_GRADE = 'F9'

All configuration values are lazily loaded to avoid Django setup issues.
"""


def _get_setting(name, default):
    """Get a gradebook setting from Django settings or use default."""
    from django.conf import settings
    return getattr(settings, f'GRADEBOOK_{name}', default)


_DEFAULTS = {
    # Grade lookups
    'FALLBACK_GRADE': 'F',
    'MISSING_GRADE': 'N/A',
    'NO_DIVISION': 'X',
    'FULL_MARKS': 100,

    # Division bands over the grade's rank from the bottom of the scale
    'DIVISION_RANGES': [
        ('I', 4, 12),
        ('II', 13, 24),
        ('III', 25, 28),
        ('IV', 29, 32),
        ('U', 33, 36),
    ],

    # Report card text defaults
    'NO_COMMENT': 'No comment available',
    'DEFAULT_CONDUCT': 'Good',
    'DEFAULT_ATTENDANCE_REMARKS': 'Regular',
    'NO_TEACHER_INITIALS': 'N/A',

    # Bulk operation settings
    'BULK_UPDATE_BATCH_SIZE': 500,

    # Export settings
    'EXCEL_HEADER_COLOR': '4F46E5',
    'EXPORT_DIRECTORY': 'exports/broadsheets',

    # Celery task settings
    'TASK_MAX_RETRIES': 3,
    'TASK_RETRY_DELAY': 60,  # seconds
}


class _ConfigProxy:
    """
    Lazy configuration proxy that loads settings only when accessed.
    This avoids Django setup issues during module import.
    """

    def __getattr__(self, name):
        if name in _DEFAULTS:
            return _get_setting(name, _DEFAULTS[name])
        raise AttributeError(f"Unknown config setting: {name}")


_config = _ConfigProxy()


def __getattr__(name):
    """Enable module-level attribute access via the config proxy."""
    return getattr(_config, name)
