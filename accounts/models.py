import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    ADMIN = 'Admin', _('Admin')
    TEACHER = 'Teacher', _('Teacher')
    STUDENT = 'Student', _('Student')
    PARENT = 'Parent', _('Parent')


class UserManager(BaseUserManager):
    """
    Custom manager to easily create different types of school users.
    """

    def create_user(self, email, password=None, **extra_fields):
        """Base method for creating a generic user."""
        if not email:
            raise ValueError(_('The Email must be set'))
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create a Superuser (Platform Owner)."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)

    # --- ROLE SPECIFIC HELPERS ---

    def create_school_admin(self, email, password=None, **extra_fields):
        """Create a School Administrator (Principal/Head)."""
        extra_fields.setdefault('is_school_admin', True)
        extra_fields.setdefault('is_staff', False)
        return self.create_user(email, password, **extra_fields)

    def create_teacher(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_teacher', True)
        return self.create_user(email, password, **extra_fields)

    def create_student(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_student', True)
        return self.create_user(email, password, **extra_fields)

    def create_parent(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_parent', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    username = None
    email = models.EmailField(_('email address'), unique=True)

    # Roles / Flags
    is_school_admin = models.BooleanField(default=False)
    is_teacher = models.BooleanField(default=False)
    is_student = models.BooleanField(default=False)
    is_parent = models.BooleanField(default=False)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return self.email

    @property
    def role(self):
        """The single API role of this user; superusers act as Admin."""
        if self.is_superuser or self.is_school_admin:
            return Role.ADMIN
        if self.is_teacher:
            return Role.TEACHER
        if self.is_student:
            return Role.STUDENT
        if self.is_parent:
            return Role.PARENT
        return None

    @property
    def role_label(self):
        """Helper to get a string representation of the user's role"""
        if self.is_superuser:
            return "Super Admin"
        if self.is_school_admin:
            return "School Admin"
        return self.role.label if self.role else "User"


def generate_token_key():
    return secrets.token_hex(20)


def default_token_expiry():
    return timezone.now() + timedelta(hours=settings.API_TOKEN_TTL_HOURS)


class ApiTokenQuerySet(models.QuerySet):
    def active(self):
        return self.filter(
            revoked=False,
            expires_at__gt=timezone.now(),
            user__is_active=True,
        )


class ApiToken(models.Model):
    """
    Bearer token presented in the Authorization header of API requests.
    Looked up against the tenant database on every request.
    """
    key = models.CharField(max_length=40, unique=True, default=generate_token_key, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='api_tokens'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_token_expiry)
    last_used_at = models.DateTimeField(null=True, blank=True)
    revoked = models.BooleanField(default=False)

    objects = ApiTokenQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name = "API Token"
        verbose_name_plural = "API Tokens"

    def __str__(self):
        return f"{self.user} ({self.key[:8]}...)"

    @property
    def is_expired(self):
        return self.expires_at <= timezone.now()

    def revoke(self):
        self.revoked = True
        self.save(update_fields=['revoked'])
