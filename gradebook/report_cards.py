"""
Report card aggregation.

Turns rows that the caller has already fetched (exam results with their
exams, the class's subject allocations, grading and comment bands, attendance
records) into report card documents. Nothing here touches the database, and
missing or malformed values degrade to defaults instead of raising.

Phases are the exam types BOT, MID and END. A report shows two of them:
``mid-end`` (MID and END) or ``bot-mid`` (BOT and MID); the second phase is
the final one that drives the overall comments and class positions.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from . import config

BOT, MID, END = 'BOT', 'MID', 'END'
PHASES = (BOT, MID, END)

PHASE_KEYS = {
    BOT: 'botTerm',
    MID: 'midTerm',
    END: 'endTerm',
}

REPORT_TYPES = {
    'mid-end': (MID, END),
    'bot-mid': (BOT, MID),
}
DEFAULT_REPORT_TYPE = 'mid-end'

PRESENT = 'P'


def to_decimal(value):
    """Decimal for a numeric value; anything unusable counts as 0."""
    if value is None:
        return Decimal('0')
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal('0')
    return number if number.is_finite() else Decimal('0')


def round_half_up(value):
    return int(to_decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def as_number(value):
    """JSON-friendly number: int when whole, float otherwise."""
    value = to_decimal(value)
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def band_value(value):
    """Percentage as compared against band bounds, which carry 2 decimal places."""
    value = to_decimal(value)
    try:
        return value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return value


def percentage_of(marks, total_marks):
    total_marks = to_decimal(total_marks)
    if total_marks <= 0:
        return Decimal('0')
    return to_decimal(marks) / total_marks * 100


def get_grade(percentage, grade_scales):
    """
    Grade label of the first band (in the given order) whose inclusive range
    contains ``percentage``; the fallback grade when none does.
    """
    percentage = band_value(percentage)
    for scale in grade_scales:
        if to_decimal(scale.min_percentage) <= percentage <= to_decimal(scale.max_percentage):
            return scale.grade_label
    return config.FALLBACK_GRADE


def calculate_division(grade, grade_scales):
    """
    Division for an overall grade. The grade is numbered by its rank counted
    from the bottom of the (descending) scale, then mapped through the
    configured division ranges.
    """
    labels = [scale.grade_label for scale in grade_scales]
    if grade not in labels:
        return config.NO_DIVISION

    grade_number = len(labels) - labels.index(grade)
    for division, low, high in config.DIVISION_RANGES:
        if low <= grade_number <= high:
            return division
    return config.NO_DIVISION


def get_comment(comment_bands, average):
    average = band_value(average)
    for band in comment_bands:
        if to_decimal(band.min_percentage) <= average <= to_decimal(band.max_percentage):
            return band.comment
    return config.NO_COMMENT


def trend_comment(final_percentage, earlier_percentage):
    """Compare a subject's final phase with the phase before it."""
    if earlier_percentage > 0:
        if final_percentage > earlier_percentage:
            return 'Improved'
        if final_percentage < earlier_percentage:
            return 'Needs improvement'
        return 'Consistent'
    return 'Good'


def teacher_initials(teacher):
    """'Ama Serwaa Mensah' -> 'A.S.M'."""
    name = getattr(teacher, 'full_name', '') if teacher is not None else ''
    words = name.split()
    if not words:
        return config.NO_TEACHER_INITIALS
    return '.'.join(word[0] for word in words)


def competition_positions(values):
    """
    Standard competition ranking ("1224") of ``values``, highest first:
    each position is 1 + the number of strictly greater values.
    """
    ordered = sorted(values, reverse=True)
    first_index = {}
    for index, value in enumerate(ordered):
        first_index.setdefault(value, index)
    return [first_index[value] + 1 for value in values]


def calculate_attendance(attendance_records):
    """Percentage of records marked Present; 100 when there are none."""
    records = list(attendance_records)
    if not records:
        return 100
    present = sum(1 for record in records if record.status == PRESENT)
    return round_half_up(Decimal(present) / Decimal(len(records)) * 100)


def group_results(exam_results):
    """
    Map subject id -> {phase: result}. A later result for the same subject
    and phase replaces an earlier one.
    """
    grouped = {}
    for result in exam_results:
        exam = getattr(result, 'exam', None)
        if exam is None or exam.exam_type not in PHASES:
            continue
        grouped.setdefault(exam.subject_id, {})[exam.exam_type] = result
    return grouped


class ReportCardBuilder:
    """
    Builds report cards for one term, class-level inputs fixed up front.

    ``class_subjects`` are ClassSubject rows (with ``subject`` and ``teacher``
    loaded). ``grade_scales`` and both comment band lists are expected in
    descending ``min_percentage`` order; lookups take the first match.
    """

    def __init__(self, term, school, class_subjects, grade_scales,
                 class_teacher_comments=(), head_teacher_comments=(),
                 report_type=DEFAULT_REPORT_TYPE):
        if report_type not in REPORT_TYPES:
            raise ValueError(f"Unknown report type: {report_type}")
        self.term = term
        self.school = school
        self.class_subjects = list(class_subjects)
        self.grade_scales = list(grade_scales)
        self.class_teacher_comments = list(class_teacher_comments)
        self.head_teacher_comments = list(head_teacher_comments)
        self.report_type = report_type
        self.phases = REPORT_TYPES[report_type]

    @property
    def final_phase(self):
        return self.phases[-1]

    def phase_cell(self, result):
        if result is None:
            return {
                'marks': 0,
                'grade': config.MISSING_GRADE,
                'percentage': 0,
            }, Decimal('0')

        percentage = percentage_of(result.marks_obtained, result.exam.total_marks)
        return {
            'marks': as_number(result.marks_obtained),
            'grade': result.grade or get_grade(percentage, self.grade_scales),
            'percentage': round_half_up(percentage),
        }, percentage

    def subject_rows(self, exam_results):
        grouped = group_results(exam_results)
        rows = []
        for class_subject in self.class_subjects:
            subject = class_subject.subject
            results = grouped.get(subject.pk, {})
            row = {
                'id': subject.pk,
                'name': subject.name,
                'fullMarks': config.FULL_MARKS,
            }
            percentages = []
            for phase in self.phases:
                row[PHASE_KEYS[phase]], percentage = self.phase_cell(results.get(phase))
                percentages.append(percentage)
            row['teacherComment'] = trend_comment(percentages[-1], percentages[0])
            row['teacherInitials'] = teacher_initials(class_subject.teacher)
            rows.append(row)

        for phase in self.phases:
            key = PHASE_KEYS[phase]
            marks = [to_decimal(row[key]['marks']) for row in rows]
            for row, position in zip(rows, competition_positions(marks)):
                row[key]['position'] = position
        return rows

    def term_stats(self, rows, phase):
        key = PHASE_KEYS[phase]
        counted = [row[key] for row in rows if to_decimal(row[key]['marks']) > 0]
        if not counted:
            return {
                'total': 0,
                'average': 0,
                'grade': config.MISSING_GRADE,
                'division': config.NO_DIVISION,
                'aggregate': 0,
            }

        total = sum(to_decimal(cell['marks']) for cell in counted)
        average = round_half_up(total / len(counted))
        grade = get_grade(average, self.grade_scales)
        return {
            'total': as_number(total),
            'average': average,
            'grade': grade,
            'division': calculate_division(grade, self.grade_scales),
            'aggregate': sum(cell['position'] for cell in counted),
        }

    def student_info(self, student):
        class_obj = student.current_class
        return {
            'id': student.pk,
            'name': student.full_name,
            'rollNum': student.admission_number,
            'gender': student.get_gender_display(),
            'photo': student.photo_url,
            'class': class_obj.name if class_obj else None,
            'year': self.term.year,
        }

    def term_info(self):
        term = self.term
        return {
            'id': term.pk,
            'name': term.name,
            'year': term.year,
            'startDate': term.start_date.isoformat() if term.start_date else None,
            'endDate': term.end_date.isoformat() if term.end_date else None,
            'nextTermStarts': term.next_term_starts.isoformat() if term.next_term_starts else None,
            'nextTermEnds': term.next_term_ends.isoformat() if term.next_term_ends else None,
        }

    def school_info(self):
        if self.school is None:
            return {'id': None, 'name': ''}
        return {'id': self.school.pk, 'name': self.school.name}

    def grading_scale(self):
        return [
            {
                'from': as_number(scale.min_percentage),
                'to': as_number(scale.max_percentage),
                'grade': scale.grade_label,
                'interpretation': scale.interpretation,
            }
            for scale in self.grade_scales
        ]

    def conduct(self, student, attendance_records):
        return {
            'discipline': student.discipline or config.DEFAULT_CONDUCT,
            'timeManagement': student.time_management or config.DEFAULT_CONDUCT,
            'smartness': student.smartness or config.DEFAULT_CONDUCT,
            'attendanceRemarks': student.attendance_remarks or config.DEFAULT_ATTENDANCE_REMARKS,
            'attendancePercentage': calculate_attendance(attendance_records),
        }

    def build(self, student, exam_results=(), attendance_records=()):
        """Report card for one student from their results and attendance this term."""
        rows = self.subject_rows(exam_results)
        performance = {PHASE_KEYS[phase]: self.term_stats(rows, phase) for phase in self.phases}
        final_average = performance[PHASE_KEYS[self.final_phase]]['average']

        return {
            'student': self.student_info(student),
            'school': self.school_info(),
            'term': self.term_info(),
            'reportType': self.report_type,
            'subjects': rows,
            'performance': performance,
            'conduct': self.conduct(student, attendance_records),
            'comments': {
                'classTeacher': get_comment(self.class_teacher_comments, final_average),
                'headTeacher': get_comment(self.head_teacher_comments, final_average),
            },
            'gradingScale': self.grading_scale(),
        }

    def build_class(self, students, results_by_student, attendance_by_student):
        """
        Report cards for every student, each built independently, plus each
        student's class position by final-phase average.
        """
        cards = [
            self.build(
                student,
                results_by_student.get(student.pk, ()),
                attendance_by_student.get(student.pk, ()),
            )
            for student in students
        ]

        final_key = PHASE_KEYS[self.final_phase]
        averages = [card['performance'][final_key]['average'] for card in cards]
        for card, position in zip(cards, competition_positions(averages)):
            card['classPosition'] = position
            card['classSize'] = len(cards)
        return cards
