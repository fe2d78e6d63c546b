from django import forms

from core.forms import ModelDefaultsMixin

from .models import AttendanceRecord, Class, Subject, ClassSubject


class ClassForm(ModelDefaultsMixin, forms.ModelForm):
    class Meta:
        model = Class
        fields = ['level_type', 'level_number', 'section', 'class_teacher', 'is_active']

    def clean_section(self):
        return self.cleaned_data['section'].strip().upper()


class SubjectForm(ModelDefaultsMixin, forms.ModelForm):
    class Meta:
        model = Subject
        fields = ['name', 'short_name', 'is_core', 'is_active']

    def clean_short_name(self):
        return self.cleaned_data['short_name'].strip().upper()


class ClassSubjectForm(forms.ModelForm):
    """Allocates a subject, and optionally its teacher, to a class."""

    class Meta:
        model = ClassSubject
        fields = ['subject', 'teacher']


class AttendanceQueryForm(forms.Form):
    """Selects one class register: ``classId`` and ``date``."""
    class_id = forms.IntegerField(min_value=1)
    date = forms.DateField()


class AttendanceEntryForm(forms.Form):
    """A single student's line in a register submission."""
    student_id = forms.IntegerField(min_value=1)
    status = forms.ChoiceField(choices=AttendanceRecord.Status.choices)
    remarks = forms.CharField(max_length=100, required=False)
