"""
Utility functions for the gradebook app.

Fetch everything a report card needs in a handful of queries and hand it to
the aggregator in gradebook.report_cards; build the Excel broadsheet used by
both the export view and the background export task.
"""
import logging
from io import BytesIO

import openpyxl
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter
from django.db import connection

from academics.models import ClassSubject, AttendanceRecord
from students.models import Student

from . import config
from .models import GradeScale, CommentBand, ExamResult
from .report_cards import ReportCardBuilder, PHASE_KEYS

logger = logging.getLogger(__name__)


def get_current_school():
    """The School whose schema is active on this connection, if any."""
    from schools.models import School
    return School.objects.filter(schema_name=connection.schema_name).first()


def get_report_builder(class_obj, term, report_type):
    """ReportCardBuilder loaded with the class's subjects and the school's bands."""
    class_subjects = ClassSubject.objects.filter(
        class_assigned=class_obj
    ).select_related('subject', 'teacher').order_by('subject__name')

    comment_bands = list(CommentBand.objects.order_by('-min_percentage'))

    return ReportCardBuilder(
        term=term,
        school=get_current_school(),
        class_subjects=class_subjects,
        grade_scales=GradeScale.objects.order_by('-min_percentage'),
        class_teacher_comments=[b for b in comment_bands if b.kind == CommentBand.Kind.CLASS_TEACHER],
        head_teacher_comments=[b for b in comment_bands if b.kind == CommentBand.Kind.HEAD_TEACHER],
        report_type=report_type,
    )


def get_results_by_student(students, term):
    """
    Exam results of ``students`` in ``term``, grouped by student id, oldest
    first so the most recently entered or edited mark wins a duplicate phase.
    """
    results = ExamResult.objects.filter(
        student__in=students,
        exam__term=term,
    ).select_related('exam').order_by('updated_at', 'pk')

    grouped = {}
    for result in results:
        grouped.setdefault(result.student_id, []).append(result)
    return grouped


def get_attendance_by_student(students, term):
    """Attendance records dated within the term's own start and end dates."""
    records = AttendanceRecord.objects.filter(
        student__in=students,
        session__date__gte=term.start_date,
        session__date__lte=term.end_date,
    )

    grouped = {}
    for record in records:
        grouped.setdefault(record.student_id, []).append(record)
    return grouped


def build_student_report_card(student, term, report_type):
    builder = get_report_builder(student.current_class, term, report_type)
    results = get_results_by_student([student], term)
    attendance = get_attendance_by_student([student], term)
    return builder.build(
        student,
        results.get(student.pk, ()),
        attendance.get(student.pk, ()),
    )


def build_class_report_cards(class_obj, term, report_type):
    """
    Returns:
        tuple: (builder, list of report cards ordered by student name)
    """
    students = list(
        Student.objects.filter(
            current_class=class_obj,
            status=Student.Status.ACTIVE,
        ).select_related('current_class').order_by('last_name', 'first_name')
    )
    builder = get_report_builder(class_obj, term, report_type)
    cards = builder.build_class(
        students,
        get_results_by_student(students, term),
        get_attendance_by_student(students, term),
    )
    logger.info(f"Built {len(cards)} report cards for {class_obj} ({term}, {report_type})")
    return builder, cards


# ============ Broadsheet Export ============

def build_broadsheet(class_obj, term, builder, cards):
    """
    One row per student: each subject's marks per phase, the phase totals,
    averages and divisions, then class position.

    Returns:
        openpyxl.Workbook
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Broadsheet"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color=config.EXCEL_HEADER_COLOR, end_color=config.EXCEL_HEADER_COLOR, fill_type="solid")
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    phase_keys = [PHASE_KEYS[phase] for phase in builder.phases]
    subjects = [cs.subject for cs in builder.class_subjects]

    headers = ["Roll No.", "Student Name"]
    for subject in subjects:
        for key in phase_keys:
            headers.append(f"{subject.name} ({key})")
    for key in phase_keys:
        headers.extend([f"Total ({key})", f"Average ({key})", f"Division ({key})"])
    headers.extend(["Attendance %", "Position"])

    ws.cell(row=1, column=1, value=f"{class_obj.name} - {term.name} {term.year}").font = Font(bold=True, size=14)

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=2, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', wrap_text=True)
        cell.border = thin_border

    for row, card in enumerate(cards, 3):
        values = [card['student']['rollNum'], card['student']['name']]
        for subject_row in card['subjects']:
            for key in phase_keys:
                values.append(subject_row[key]['marks'])
        for key in phase_keys:
            stats = card['performance'][key]
            values.extend([stats['total'], stats['average'], stats['division']])
        values.extend([card['conduct']['attendancePercentage'], card['classPosition']])

        for col, value in enumerate(values, 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = thin_border
            if col > 2:
                cell.alignment = Alignment(horizontal='center')

    ws.column_dimensions['A'].width = 15
    ws.column_dimensions['B'].width = 28
    for col in range(3, len(headers) + 1):
        ws.column_dimensions[get_column_letter(col)].width = 14
    ws.freeze_panes = 'C3'

    return wb


def broadsheet_filename(class_obj, term, report_type):
    return f"broadsheet_{class_obj.name}_{term.name}_{report_type}.xlsx".replace(' ', '_')


def render_broadsheet(class_obj, term, report_type):
    """
    Returns:
        tuple: (filename, xlsx bytes)
    """
    builder, cards = build_class_report_cards(class_obj, term, report_type)
    wb = build_broadsheet(class_obj, term, builder, cards)
    buffer = BytesIO()
    wb.save(buffer)
    return broadsheet_filename(class_obj, term, report_type), buffer.getvalue()
