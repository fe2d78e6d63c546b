from django import forms

from .models import AcademicYear, Term


class ModelDefaultsMixin:
    """Model fields that carry a default may be left out of the payload."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in self._defaulted_fields():
            self.fields[name].required = False

    def _defaulted_fields(self):
        opts = self._meta.model._meta
        return [name for name in self.fields if opts.get_field(name).has_default()]

    def clean(self):
        cleaned_data = super().clean()
        opts = self._meta.model._meta
        for name in self._defaulted_fields():
            if name not in self.data or cleaned_data.get(name) in (None, ''):
                cleaned_data[name] = opts.get_field(name).get_default()
        return cleaned_data


class TermForm(forms.ModelForm):
    class Meta:
        model = Term
        fields = [
            'academic_year', 'name', 'term_number', 'start_date', 'end_date',
            'next_term_starts', 'next_term_ends', 'is_current',
        ]

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        next_term_starts = cleaned_data.get('next_term_starts')

        if start_date and end_date and start_date > end_date:
            self.add_error('end_date', 'End date must be on or after the start date.')
        if end_date and next_term_starts and next_term_starts <= end_date:
            self.add_error('next_term_starts', 'Next term must start after this term ends.')

        return cleaned_data


class AcademicYearForm(forms.ModelForm):
    class Meta:
        model = AcademicYear
        fields = ['name', 'start_date', 'end_date', 'is_current']

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and start_date >= end_date:
            self.add_error('end_date', 'End date must be after the start date.')
        return cleaned_data
