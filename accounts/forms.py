from django import forms
from django.contrib.auth.forms import (
    UserChangeForm as BaseUserChangeForm,
    UserCreationForm as BaseUserCreationForm,
)

from .models import User


class LoginForm(forms.Form):
    """Credentials exchanged for an API token."""

    email = forms.EmailField(label="Email")
    password = forms.CharField(label="Password", strip=False)

    error_messages = {
        'invalid_login': "Invalid email or password. Please try again.",
        'inactive': "This account is inactive. Contact your administrator.",
    }


class AccountForm(forms.Form):
    """Login credentials created alongside a teacher, student or parent profile."""

    email = forms.EmailField(label="Email")
    password = forms.CharField(label="Password", strip=False, min_length=8)

    def clean_email(self):
        email = User.objects.normalize_email(self.cleaned_data['email'])
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("A user with this email already exists.")
        return email

    def create_user(self, factory, **extra_fields):
        """Create the user through a manager helper such as ``User.objects.create_teacher``."""
        return factory(self.cleaned_data['email'], self.cleaned_data['password'], **extra_fields)


class UserCreationForm(BaseUserCreationForm):
    class Meta:
        model = User
        fields = ('email',)


class UserChangeForm(BaseUserChangeForm):
    class Meta:
        model = User
        fields = '__all__'
