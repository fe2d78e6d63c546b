from django import forms

from .models import GradeScale, CommentBand, Exam, ExamResult


class GradeScaleForm(forms.ModelForm):
    """Grading band; overlap with other bands is rejected by the model."""

    class Meta:
        model = GradeScale
        fields = ['min_percentage', 'max_percentage', 'grade_label', 'interpretation']


class CommentBandForm(forms.ModelForm):
    """The band's kind is fixed by the endpoint, not the payload."""

    class Meta:
        model = CommentBand
        fields = ['min_percentage', 'max_percentage', 'comment']


class ExamForm(forms.ModelForm):
    class Meta:
        model = Exam
        fields = ['term', 'class_assigned', 'subject', 'exam_type', 'name', 'total_marks', 'date']

    def clean(self):
        cleaned_data = super().clean()
        term = cleaned_data.get('term')
        exam_date = cleaned_data.get('date')
        if term and exam_date and not (term.start_date <= exam_date <= term.end_date):
            self.add_error('date', 'Exam date must fall within the term.')
        return cleaned_data


class ExamResultForm(forms.ModelForm):
    """
    One mark in a bulk marks submission. ``roster`` is the set of student ids
    allowed in the exam's class.
    """
    student_id = forms.IntegerField(min_value=1)

    class Meta:
        model = ExamResult
        fields = ['marks_obtained', 'grade', 'remarks']

    def __init__(self, *args, exam=None, roster=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.exam = exam
        self.roster = roster

    def clean_student_id(self):
        student_id = self.cleaned_data['student_id']
        if self.roster is not None and student_id not in self.roster:
            raise forms.ValidationError('Student is not in this class.')
        return student_id

    def clean_marks_obtained(self):
        marks = self.cleaned_data['marks_obtained']
        if self.exam is not None and marks > self.exam.total_marks:
            raise forms.ValidationError(
                f'Marks cannot exceed the exam total of {self.exam.total_marks}.'
            )
        return marks


class ExamFilterForm(forms.Form):
    """Query-string filters for the exam list."""
    term_id = forms.IntegerField(required=False)
    class_id = forms.IntegerField(required=False)
    subject_id = forms.IntegerField(required=False)
    exam_type = forms.ChoiceField(choices=Exam.ExamType.choices, required=False)
