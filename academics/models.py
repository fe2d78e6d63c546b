from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from teachers.models import Teacher


class Class(models.Model):
    """
    A class/classroom grouping of students.

    Names are generated from the level: KG1-A, B3-B, B8-A (JHS 2), SHS2-C.
    """
    class LevelType(models.TextChoices):
        KG = 'kg', _('Kindergarten')
        PRIMARY = 'primary', _('Primary')
        JHS = 'jhs', _('JHS')
        SHS = 'shs', _('SHS')

    level_type = models.CharField(
        max_length=10,
        choices=LevelType.choices,
        default=LevelType.PRIMARY
    )
    level_number = models.PositiveSmallIntegerField(
        help_text="1, 2, 3, etc."
    )
    section = models.CharField(
        max_length=5,
        help_text="A, B, C, etc."
    )

    name = models.CharField(
        max_length=20,
        editable=False,
        help_text="Auto-generated: B1-A, B8-B, SHS1-A"
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class_teacher = models.ForeignKey(
        'teachers.Teacher',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_classes',
        help_text="The form tutor or class teacher responsible for this class."
    )

    class Meta:
        ordering = ['level_type', 'level_number', 'section']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        unique_together = ['level_type', 'level_number', 'section']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.name = self.generate_name()
        super().save(*args, **kwargs)

    def generate_name(self):
        """Generate class name based on level type."""
        if self.level_type == self.LevelType.KG:
            return f"KG{self.level_number}-{self.section}"
        elif self.level_type == self.LevelType.PRIMARY:
            return f"B{self.level_number}-{self.section}"
        elif self.level_type == self.LevelType.JHS:
            # JHS is B7-B9, so add 6 to get actual Basic number
            return f"B{self.level_number + 6}-{self.section}"
        return f"{self.level_type.upper()}{self.level_number}-{self.section}"

    @property
    def level_display(self):
        if self.level_type == self.LevelType.KG:
            return f"KG {self.level_number}"
        elif self.level_type == self.LevelType.PRIMARY:
            return f"Basic {self.level_number}"
        elif self.level_type == self.LevelType.JHS:
            return f"JHS {self.level_number}"
        return f"SHS {self.level_number}"

    def to_dict(self):
        teacher = self.class_teacher
        return {
            'id': self.pk,
            'name': self.name,
            'level': self.level_display,
            'classTeacher': {'id': teacher.pk, 'name': teacher.full_name} if teacher else None,
        }


class Subject(models.Model):
    """
    A subject taught at the school.
    """
    name = models.CharField(
        max_length=100,
        help_text="e.g., Mathematics, English Language, Integrated Science"
    )
    short_name = models.CharField(
        max_length=20,
        help_text="e.g., MATH, ENG, INT SCI"
    )
    is_core = models.BooleanField(
        default=True,
        help_text="Core subjects are mandatory"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-is_core', 'name']
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"

    def __str__(self):
        return self.name

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'shortName': self.short_name,
            'isCore': self.is_core,
            'isActive': self.is_active,
        }


class ClassSubject(models.Model):
    """
    Links a Class to a Subject and assigns the teacher who teaches it.
    A class's subject list is the set of its ClassSubjects.
    """
    class_assigned = models.ForeignKey(
        Class,
        on_delete=models.CASCADE,
        related_name='subjects'
    )
    subject = models.ForeignKey(
        Subject,
        on_delete=models.CASCADE,
        related_name='class_allocations'
    )
    teacher = models.ForeignKey(
        Teacher,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subject_assignments'
    )

    class Meta:
        unique_together = ['class_assigned', 'subject']
        ordering = ['subject__name']
        verbose_name = "Subject Allocation"
        verbose_name_plural = "Subject Allocations"

    def __str__(self):
        return f"{self.subject.name} - {self.class_assigned.name}"

    def to_dict(self):
        teacher = self.teacher
        return {
            'id': self.pk,
            'subject': {'id': self.subject_id, 'name': self.subject.name, 'shortName': self.subject.short_name},
            'teacher': {'id': teacher.pk, 'name': teacher.full_name} if teacher else None,
        }


class AttendanceSession(models.Model):
    """One daily register per class per date."""
    class_assigned = models.ForeignKey(Class, on_delete=models.CASCADE, related_name='attendance_sessions')
    date = models.DateField(default=timezone.localdate)
    created_by = models.ForeignKey('teachers.Teacher', on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['class_assigned', 'date']
        ordering = ['-date']

    def __str__(self):
        return f"{self.class_assigned} - {self.date}"


class AttendanceRecord(models.Model):
    class Status(models.TextChoices):
        PRESENT = 'P', 'Present'
        ABSENT = 'A', 'Absent'
        LATE = 'L', 'Late'

    session = models.ForeignKey(AttendanceSession, on_delete=models.CASCADE, related_name='records')
    student = models.ForeignKey('students.Student', on_delete=models.CASCADE, related_name='attendance_records')
    status = models.CharField(max_length=1, choices=Status.choices, default=Status.PRESENT)
    remarks = models.CharField(max_length=100, blank=True)

    class Meta:
        unique_together = ['session', 'student']

    def __str__(self):
        return f"{self.student} - {self.session.date}: {self.get_status_display()}"
