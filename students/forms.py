from django import forms

from core.forms import ModelDefaultsMixin
from .models import Student, Guardian


class StudentForm(ModelDefaultsMixin, forms.ModelForm):
    class Meta:
        model = Student
        fields = [
            'first_name', 'last_name', 'other_names', 'date_of_birth', 'gender',
            'admission_number', 'admission_date', 'current_class', 'status',
        ]
        error_messages = {
            'admission_number': {'unique': 'A student with this roll number already exists.'},
        }

    def clean_admission_number(self):
        return self.cleaned_data['admission_number'].strip()


class GuardianForm(ModelDefaultsMixin, forms.ModelForm):
    class Meta:
        model = Guardian
        fields = ['full_name', 'phone_number', 'relationship', 'students']


class ConductForm(forms.ModelForm):
    """The class teacher's conduct assessment printed on report cards."""

    class Meta:
        model = Student
        fields = ['discipline', 'time_management', 'smartness', 'attendance_remarks']
