from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class PercentageBand(models.Model):
    """Inclusive percentage range; bands of one set must not overlap."""
    min_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Lowest percentage in this band (inclusive)'
    )
    max_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Highest percentage in this band (inclusive)'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-min_percentage']

    def sibling_bands(self):
        """Bands this one must not overlap."""
        return type(self).objects.exclude(pk=self.pk)

    def clean(self):
        """Validate that min <= max and ranges don't overlap"""
        if self.min_percentage is None or self.max_percentage is None:
            return
        if self.min_percentage > self.max_percentage:
            raise ValidationError('Minimum percentage cannot be greater than maximum percentage')

        overlapping = self.sibling_bands().filter(
            min_percentage__lte=self.max_percentage,
            max_percentage__gte=self.min_percentage
        )
        if overlapping.exists():
            raise ValidationError(f'Range overlaps with existing band: {overlapping.first()}')


class GradeScale(PercentageBand):
    """A grade band, e.g. A1 = 80-100."""
    grade_label = models.CharField(
        max_length=10,
        unique=True,
        help_text='Grade label (e.g., A1, B2, C6)'
    )
    interpretation = models.CharField(
        max_length=50,
        blank=True,
        help_text='Grade interpretation (e.g., Excellent, Very Good, Credit, Pass, Fail)'
    )

    class Meta(PercentageBand.Meta):
        db_table = 'grade_scale'
        verbose_name = 'Grade Scale'
        verbose_name_plural = 'Grade Scales'

    def __str__(self):
        return f"{self.grade_label} ({self.min_percentage}-{self.max_percentage}%)"

    def to_dict(self):
        return {
            'id': self.pk,
            'from': float(self.min_percentage),
            'to': float(self.max_percentage),
            'grade': self.grade_label,
            'interpretation': self.interpretation,
        }


class CommentBand(PercentageBand):
    """
    Remark printed for an overall average in a percentage range. Class
    teacher and head teacher remarks are separate band sets.
    """
    class Kind(models.TextChoices):
        CLASS_TEACHER = 'class_teacher', _('Class Teacher')
        HEAD_TEACHER = 'head_teacher', _('Head Teacher')

    kind = models.CharField(max_length=20, choices=Kind.choices, db_index=True)
    comment = models.TextField()
    teacher = models.ForeignKey(
        'teachers.Teacher',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='comment_bands',
        help_text='Teacher who wrote the remark'
    )

    class Meta(PercentageBand.Meta):
        verbose_name = 'Comment Band'
        verbose_name_plural = 'Comment Bands'

    def __str__(self):
        return f"{self.get_kind_display()} {self.min_percentage}-{self.max_percentage}%"

    def sibling_bands(self):
        return CommentBand.objects.filter(kind=self.kind).exclude(pk=self.pk)

    def to_dict(self):
        return {
            'id': self.pk,
            'kind': self.kind,
            'from': float(self.min_percentage),
            'to': float(self.max_percentage),
            'comment': self.comment,
            'teacherId': str(self.teacher_id) if self.teacher_id else None,
        }


class Exam(models.Model):
    """One checkpoint exam for a subject in a class during a term."""
    class ExamType(models.TextChoices):
        BOT = 'BOT', _('Beginning of Term')
        MID = 'MID', _('Mid-Term')
        END = 'END', _('End of Term')

    term = models.ForeignKey('core.Term', on_delete=models.CASCADE, related_name='exams')
    class_assigned = models.ForeignKey('academics.Class', on_delete=models.CASCADE, related_name='exams')
    subject = models.ForeignKey('academics.Subject', on_delete=models.CASCADE, related_name='exams')
    exam_type = models.CharField(max_length=3, choices=ExamType.choices)
    name = models.CharField(max_length=100, blank=True)
    total_marks = models.PositiveIntegerField(
        default=100,
        validators=[MinValueValidator(1)],
    )
    date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['term', 'class_assigned', 'subject', 'exam_type']
        indexes = [
            models.Index(fields=['term', 'class_assigned'], name='exam_term_class_idx'),
        ]

    def __str__(self):
        return self.name or f"{self.subject} {self.exam_type} - {self.class_assigned}"

    def to_dict(self):
        return {
            'id': self.pk,
            'name': str(self),
            'termId': self.term_id,
            'classId': self.class_assigned_id,
            'subjectId': self.subject_id,
            'examType': self.exam_type,
            'totalMarks': self.total_marks,
            'date': self.date.isoformat() if self.date else None,
        }


class ExamResult(models.Model):
    """A student's mark in one exam. The subject is the exam's subject."""
    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='results')
    student = models.ForeignKey('students.Student', on_delete=models.CASCADE, related_name='exam_results')
    marks_obtained = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        validators=[MinValueValidator(0)]
    )
    grade = models.CharField(max_length=10, blank=True, help_text='Overrides the looked-up grade when set')
    remarks = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ['exam', 'student']
        ordering = ['created_at']

    def __str__(self):
        return f"{self.student} - {self.exam}: {self.marks_obtained}"

    def clean(self):
        if self.marks_obtained is not None and self.exam_id and self.marks_obtained > self.exam.total_marks:
            raise ValidationError(
                f'Marks ({self.marks_obtained}) cannot exceed total marks ({self.exam.total_marks})'
            )
