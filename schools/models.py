import re

from django.core.exceptions import ValidationError
from django.db import models
from django_tenants.models import TenantMixin, DomainMixin


RESERVED_SCHEMA_NAMES = ('public', 'www', 'admin', 'postgres')


def validate_schema_name(schema_name):
    """
    Normalise and validate a tenant schema name.
    Must be lowercase letters, digits or underscores, and not reserved.
    """
    schema_name = (schema_name or '').lower()
    if not re.match(r'^[a-z0-9_]+$', schema_name):
        raise ValidationError(
            "Invalid format. Use only lowercase letters, numbers, and underscores. "
            "NO hyphens (-) or spaces allowed."
        )
    if schema_name in RESERVED_SCHEMA_NAMES:
        raise ValidationError(f"The name '{schema_name}' is reserved.")
    return schema_name


class School(TenantMixin):
    # Basic Info
    name = models.CharField(max_length=100)
    short_name = models.CharField(max_length=20, blank=True, help_text="Short name for report headers")

    # Contact & Address
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    motto = models.CharField(max_length=200, blank=True)

    # Administration
    headmaster_name = models.CharField(max_length=100, blank=True, verbose_name="Head's Name")
    headmaster_title = models.CharField(max_length=50, blank=True, default="Headmaster", verbose_name="Head's Title")

    # Metadata
    created_on = models.DateField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    auto_create_schema = True

    def __str__(self):
        return self.name

    @property
    def display_name(self):
        """Return short_name if available, otherwise name."""
        return self.short_name or self.name


class Domain(DomainMixin):
    pass
