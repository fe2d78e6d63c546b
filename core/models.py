from django.core.exceptions import ValidationError
from django.db import models

from .choices import Gender


class Person(models.Model):
    """
    Abstract Person model.
    Removes 'title' so it doesn't force it upon Students.
    """
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    middle_name = models.CharField(max_length=50, blank=True, default='')

    gender = models.CharField(
        max_length=1,
        choices=Gender.choices,
        default=Gender.MALE
    )
    date_of_birth = models.DateField(null=True, blank=True)
    photo = models.ImageField(upload_to='photos/', blank=True, null=True)

    # Contact
    phone_number = models.CharField(max_length=17, blank=True)
    email = models.EmailField(blank=True, null=True)

    class Meta:
        abstract = True

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(filter(None, parts))


class AcademicYear(models.Model):
    """
    Represents an academic year (e.g., 2024/2025).
    Each tenant has their own academic years.
    """
    name = models.CharField(
        max_length=50,
        help_text="e.g., 2024/2025 Academic Year"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    is_current = models.BooleanField(
        default=False,
        help_text="Only one academic year can be current at a time"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Ensure only one academic year is current
        if self.is_current:
            AcademicYear.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)
        super().save(*args, **kwargs)

    @classmethod
    def get_current(cls):
        """Get the current academic year."""
        return cls.objects.filter(is_current=True).first()


class Term(models.Model):
    """
    An academic period within a year. Exams and attendance are scoped to
    the term's own start and end dates.
    """
    PERIOD_NUMBER_CHOICES = [
        (1, 'First'),
        (2, 'Second'),
        (3, 'Third'),
    ]

    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.CASCADE,
        related_name='terms'
    )
    name = models.CharField(
        max_length=50,
        help_text="e.g., First Term, Term II"
    )
    term_number = models.PositiveSmallIntegerField(
        choices=PERIOD_NUMBER_CHOICES,
        default=1,
        verbose_name="Period Number"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    next_term_starts = models.DateField(null=True, blank=True)
    next_term_ends = models.DateField(null=True, blank=True)
    is_current = models.BooleanField(
        default=False,
        help_text="Only one term can be current at a time"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['academic_year', 'term_number']
        verbose_name = "Term"
        verbose_name_plural = "Terms"
        unique_together = ['academic_year', 'term_number']

    def __str__(self):
        return f"{self.name} - {self.academic_year.name}"

    def clean(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError('Term start date cannot be after its end date')
        if self.next_term_starts and self.next_term_ends and self.next_term_starts > self.next_term_ends:
            raise ValidationError('Next term cannot end before it starts')

    def save(self, *args, **kwargs):
        # Ensure only one term is current
        if self.is_current:
            Term.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)
        super().save(*args, **kwargs)

    @property
    def year(self):
        """Calendar year the term's academic year starts in."""
        return self.academic_year.start_date.year

    @classmethod
    def get_current(cls):
        """Get the current term."""
        return cls.objects.filter(is_current=True).select_related('academic_year').first()

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'termNumber': self.term_number,
            'year': self.year,
            'academicYear': self.academic_year.name,
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat(),
            'nextTermStarts': self.next_term_starts.isoformat() if self.next_term_starts else None,
            'nextTermEnds': self.next_term_ends.isoformat() if self.next_term_ends else None,
            'isCurrent': self.is_current,
        }
