import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import Person
from core.choices import PersonTitle as Title


class Teacher(Person):
    """Teaching staff member; the user account is optional."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='teacher_profile',
        help_text="Associated user account for login"
    )

    title = models.CharField(
        max_length=10,
        choices=Title.choices,
        default=Title.MR
    )
    staff_id = models.CharField(max_length=20, unique=True, help_text="Unique Employee ID")
    employment_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.get_title_display()} {self.full_name}"

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'name': self.full_name,
            'firstName': self.first_name,
            'middleName': self.middle_name,
            'lastName': self.last_name,
            'gender': self.gender,
            'staffId': self.staff_id,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'employmentDate': self.employment_date.isoformat() if self.employment_date else None,
            'status': self.status,
            'hasAccount': self.user_id is not None,
        }

    def teaches(self, class_obj, subject=None):
        """Whether this teacher is the class teacher or teaches ``subject`` in it."""
        if subject is None and class_obj.class_teacher_id == self.pk:
            return True
        allocations = self.subject_assignments.filter(class_assigned=class_obj)
        if subject is not None:
            allocations = allocations.filter(subject=subject)
        return allocations.exists()
