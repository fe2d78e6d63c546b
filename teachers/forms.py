from django import forms

from core.forms import ModelDefaultsMixin
from .models import Teacher


class TeacherForm(ModelDefaultsMixin, forms.ModelForm):
    class Meta:
        model = Teacher
        fields = [
            'title', 'first_name', 'middle_name', 'last_name', 'gender',
            'date_of_birth', 'staff_id', 'status', 'employment_date',
            'phone_number', 'email',
        ]
