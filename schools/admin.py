import logging

from django import forms
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django_tenants.utils import schema_context, get_public_schema_name

from .models import School, Domain, validate_schema_name

User = get_user_model()
logger = logging.getLogger(__name__)


class SchoolCreationForm(forms.ModelForm):
    """Creates a school together with its first administrator."""

    admin_email = forms.EmailField(
        required=False,
        label="Principal Email",
        help_text="Email address for the school administrator",
    )
    admin_password = forms.CharField(
        required=False,
        label="Principal Password",
        help_text="Initial password",
        widget=forms.PasswordInput,
    )

    class Meta:
        model = School
        fields = '__all__'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk:
            self.fields['admin_email'].required = True
            self.fields['admin_password'].required = True

    def clean_schema_name(self):
        return validate_schema_name(self.cleaned_data.get('schema_name'))

    def clean_admin_password(self):
        password = self.cleaned_data.get('admin_password')
        if password and not self.instance.pk:
            try:
                validate_password(password)
            except ValidationError as e:
                raise forms.ValidationError(e.messages)
        return password


class DomainInline(admin.TabularInline):
    model = Domain
    extra = 0
    max_num = 1
    min_num = 1
    fields = ('domain', 'is_primary')
    verbose_name = "School Domain"


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    form = SchoolCreationForm
    inlines = [DomainInline]

    list_display = ('name', 'schema_name', 'primary_domain', 'created_on')
    readonly_fields = ('created_on',)

    @admin.display(description="Domain")
    def primary_domain(self, obj):
        domain = obj.domains.filter(is_primary=True).first() or obj.domains.first()
        return domain.domain if domain else "-"

    def save_model(self, request, obj, form, change):
        """Save school in public schema and create admin user"""
        with schema_context(get_public_schema_name()):
            is_new = obj.pk is None

            # This triggers the django-tenants 'create_schema' logic
            super().save_model(request, obj, form, change)

            if not is_new:
                return

            admin_email = form.cleaned_data.get('admin_email')
            admin_password = form.cleaned_data.get('admin_password')
            if not (admin_email and admin_password and obj.auto_create_schema):
                return

            with schema_context(obj.schema_name):
                if not User.objects.filter(email=admin_email).exists():
                    User.objects.create_school_admin(email=admin_email, password=admin_password)
                    logger.info(f"Created school admin {admin_email} for {obj.name}")
                    self.message_user(request, f"Admin {admin_email} created successfully.")

    def delete_model(self, request, obj):
        with schema_context(get_public_schema_name()):
            super().delete_model(request, obj)
