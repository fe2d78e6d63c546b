"""
Gradebook views package.

- base: report access rules and shared query-string parsing
- setup: grading bands and comment bands
- exams: exams and marks entry
- reports: report cards and the class broadsheet export
"""
from .setup import grading_list, grading_detail, comment_list, comment_detail
from .exams import exam_list, exam_detail, exam_marks
from .reports import student_report_card, class_report_cards, class_report_export
