from datetime import date
from decimal import Decimal
from io import BytesIO, StringIO
from unittest import mock

import openpyxl
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import SimpleTestCase, override_settings
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from accounts.models import ApiToken
from academics.models import Class, Subject, ClassSubject, AttendanceSession, AttendanceRecord
from core.models import AcademicYear, Term
from students.models import Student, Guardian
from teachers.models import Teacher

from .models import GradeScale, CommentBand, Exam, ExamResult
from .tasks import export_class_broadsheet
from .report_cards import (
    ReportCardBuilder, get_grade, calculate_division, calculate_attendance,
    competition_positions, teacher_initials, trend_comment, get_comment, percentage_of,
)
from .management.commands.seed_report_defaults import GRADE_SCALE

User = get_user_model()


def make_scales(bands):
    return [
        GradeScale(grade_label=label, min_percentage=Decimal(low), max_percentage=Decimal(high))
        for low, high, label in bands
    ]


WAEC_SCALE = make_scales([
    (80, 100, 'A1'), (70, '79.99', 'B2'), (65, '69.99', 'B3'), (60, '64.99', 'C4'),
    (55, '59.99', 'C5'), (50, '54.99', 'C6'), (45, '49.99', 'D7'), (40, '44.99', 'E8'),
    (0, '39.99', 'F9'),
])


# =============================================================================
# AGGREGATOR (no database)
# =============================================================================

class GradeLookupTests(SimpleTestCase):
    """Tests for grade and division lookups."""

    def setUp(self):
        self.scales = make_scales([(90, 100, 'A'), (80, 89, 'B'), (0, 79, 'C')])

    def test_percentage_in_band(self):
        self.assertEqual(get_grade(85, self.scales), 'B')

    def test_boundaries_are_inclusive(self):
        self.assertEqual(get_grade(90, self.scales), 'A')
        self.assertEqual(get_grade(89, self.scales), 'B')
        self.assertEqual(get_grade(0, self.scales), 'C')

    def test_gap_falls_back(self):
        """89.5 sits between two bands, so the fallback grade applies."""
        self.assertEqual(get_grade(Decimal('89.5'), self.scales), 'F')

    def test_default_scale_has_no_gaps(self):
        """Percentages between 79.99 and 80 still grade against the seeded scale."""
        scales = make_scales([(low, high, label) for label, low, high, _ in GRADE_SCALE])
        self.assertEqual(get_grade(percentage_of(Decimal('239.99'), 300), scales), 'A1')
        self.assertEqual(get_grade(percentage_of(Decimal('239.982'), 300), scales), 'B2')
        self.assertEqual(get_grade(Decimal('39.995'), scales), 'E8')
        self.assertEqual(get_grade(Decimal('39.994'), scales), 'F9')

    def test_empty_scale_falls_back(self):
        self.assertEqual(get_grade(50, []), 'F')

    def test_first_match_wins(self):
        """Overlapping bands resolve to the first in iteration order."""
        scales = make_scales([(50, 100, 'P'), (0, 60, 'Q')])
        self.assertEqual(get_grade(55, scales), 'P')
        self.assertEqual(get_grade(55, list(reversed(scales))), 'Q')

    def test_lookup_is_deterministic(self):
        self.assertEqual(get_grade(72, WAEC_SCALE), get_grade(72, WAEC_SCALE))

    @override_settings(GRADEBOOK_FALLBACK_GRADE='F9')
    def test_fallback_is_configurable(self):
        self.assertEqual(get_grade(50, []), 'F9')

    def test_division(self):
        """Grades are numbered from the bottom of the scale: A1 is 9, C6 is 4."""
        self.assertEqual(calculate_division('A1', WAEC_SCALE), 'I')
        self.assertEqual(calculate_division('C6', WAEC_SCALE), 'I')
        self.assertEqual(calculate_division('D7', WAEC_SCALE), 'X')
        self.assertEqual(calculate_division('N/A', WAEC_SCALE), 'X')

    @override_settings(GRADEBOOK_DIVISION_RANGES=[('I', 7, 9), ('II', 4, 6)])
    def test_division_ranges_are_configurable(self):
        self.assertEqual(calculate_division('B3', WAEC_SCALE), 'I')
        self.assertEqual(calculate_division('C5', WAEC_SCALE), 'II')


class AggregatorHelperTests(SimpleTestCase):

    def test_attendance_without_records_is_full(self):
        self.assertEqual(calculate_attendance([]), 100)

    def test_attendance_counts_only_present(self):
        """Late and Absent both count against the percentage."""
        records = [AttendanceRecord(status=s) for s in ('P', 'P', 'L')]
        self.assertEqual(calculate_attendance(records), 67)

    def test_attendance_rounds_half_up(self):
        records = [AttendanceRecord(status='P')] + [AttendanceRecord(status='A')] * 7
        self.assertEqual(calculate_attendance(records), 13)  # 12.5

    def test_competition_positions_share_ties(self):
        self.assertEqual(competition_positions([90, 80, 90, 70]), [1, 3, 1, 4])
        self.assertEqual(competition_positions([]), [])

    def test_trend_comment(self):
        self.assertEqual(trend_comment(90, 70), 'Improved')
        self.assertEqual(trend_comment(60, 80), 'Needs improvement')
        self.assertEqual(trend_comment(75, 75), 'Consistent')
        self.assertEqual(trend_comment(75, 0), 'Good')

    def test_teacher_initials(self):
        teacher = Teacher(first_name='Ama', middle_name='Serwaa', last_name='Mensah')
        self.assertEqual(teacher_initials(teacher), 'A.S.M')
        self.assertEqual(teacher_initials(None), 'N/A')

    def test_comment_lookup(self):
        bands = [
            CommentBand(min_percentage=Decimal(70), max_percentage=Decimal(100), comment='Excellent'),
            CommentBand(min_percentage=Decimal(0), max_percentage=Decimal(49), comment='Work harder'),
        ]
        self.assertEqual(get_comment(bands, 75), 'Excellent')
        self.assertEqual(get_comment(bands, 60), 'No comment available')


class ReportCardBuilderTests(SimpleTestCase):
    """Report cards built from unsaved model instances."""

    def setUp(self):
        year = AcademicYear(name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31))
        self.term = Term(
            id=1, name='First Term', academic_year=year,
            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13),
            next_term_starts=date(2025, 1, 7),
        )
        self.maths = Subject(id=1, name='Mathematics')
        self.english = Subject(id=2, name='English Language')
        self.class_subjects = [
            ClassSubject(subject=self.maths, teacher=Teacher(first_name='Kofi', last_name='Boateng')),
            ClassSubject(subject=self.english),
        ]
        self.scales = make_scales([(90, 100, 'A'), (80, 89, 'B'), (0, 79, 'C')])
        self.student = Student(id=7, first_name='Yaw', last_name='Darko', gender='M', admission_number='S007')

    def builder(self, report_type='mid-end', **kwargs):
        return ReportCardBuilder(
            term=self.term,
            school=None,
            class_subjects=self.class_subjects,
            grade_scales=self.scales,
            report_type=report_type,
            **kwargs
        )

    def result(self, subject, exam_type, marks, total_marks=100, **kwargs):
        exam = Exam(subject=subject, exam_type=exam_type, total_marks=total_marks)
        return ExamResult(exam=exam, marks_obtained=marks, **kwargs)

    def test_subject_without_results(self):
        """Subjects with no results still appear, zeroed and graded N/A."""
        card = self.builder().build(self.student)
        english = card['subjects'][1]
        self.assertEqual(english['name'], 'English Language')
        self.assertEqual(english['endTerm']['marks'], 0)
        self.assertEqual(english['endTerm']['grade'], 'N/A')
        self.assertEqual(english['endTerm']['percentage'], 0)
        self.assertEqual(english['teacherInitials'], 'N/A')

    def test_percentage_and_grade(self):
        card = self.builder().build(self.student, [self.result(self.maths, 'END', Decimal('85'))])
        cell = card['subjects'][0]['endTerm']
        self.assertEqual(cell['percentage'], 85)
        self.assertEqual(cell['grade'], 'B')

    def test_percentage_uses_total_marks(self):
        card = self.builder().build(self.student, [self.result(self.maths, 'END', 45, total_marks=50)])
        cell = card['subjects'][0]['endTerm']
        self.assertEqual(cell['marks'], 45)
        self.assertEqual(cell['percentage'], 90)
        self.assertEqual(cell['grade'], 'A')

    def test_stored_grade_takes_precedence(self):
        card = self.builder().build(self.student, [self.result(self.maths, 'END', 85, grade='B+')])
        self.assertEqual(card['subjects'][0]['endTerm']['grade'], 'B+')

    def test_term_averages_skip_subjects_without_marks(self):
        """Maths 70/90 and English -/60: mid average 70, end average 75."""
        results = [
            self.result(self.maths, 'MID', 70),
            self.result(self.maths, 'END', 90),
            self.result(self.english, 'END', 60),
        ]
        card = self.builder().build(self.student, results)
        performance = card['performance']

        self.assertEqual(performance['midTerm']['total'], 70)
        self.assertEqual(performance['midTerm']['average'], 70)
        self.assertEqual(performance['endTerm']['total'], 150)
        self.assertEqual(performance['endTerm']['average'], 75)
        self.assertEqual(performance['endTerm']['grade'], 'C')

    def test_term_stats_without_marks(self):
        performance = self.builder().build(self.student)['performance']
        self.assertEqual(performance['endTerm'], {
            'total': 0, 'average': 0, 'grade': 'N/A', 'division': 'X', 'aggregate': 0,
        })

    def test_average_rounds_half_up(self):
        results = [self.result(self.maths, 'END', 75), self.result(self.english, 'END', 74)]
        card = self.builder().build(self.student, results)
        self.assertEqual(card['performance']['endTerm']['average'], 75)  # 74.5

    def test_teacher_comment_trend(self):
        results = [
            self.result(self.maths, 'MID', 70), self.result(self.maths, 'END', 90),
            self.result(self.english, 'MID', 80), self.result(self.english, 'END', 60),
        ]
        subjects = self.builder().build(self.student, results)['subjects']
        self.assertEqual(subjects[0]['teacherComment'], 'Improved')
        self.assertEqual(subjects[1]['teacherComment'], 'Needs improvement')

    def test_teacher_comment_without_earlier_phase(self):
        card = self.builder().build(self.student, [self.result(self.maths, 'END', 90)])
        self.assertEqual(card['subjects'][0]['teacherComment'], 'Good')
        self.assertEqual(card['subjects'][0]['teacherInitials'], 'K.B')

    def test_bot_mid_report_shape(self):
        """Only the two selected phases appear."""
        results = [self.result(self.maths, 'BOT', 60), self.result(self.maths, 'MID', 60)]
        card = self.builder(report_type='bot-mid').build(self.student, results)
        row = card['subjects'][0]

        self.assertIn('botTerm', row)
        self.assertIn('midTerm', row)
        self.assertNotIn('endTerm', row)
        self.assertEqual(set(card['performance']), {'botTerm', 'midTerm'})
        self.assertEqual(row['teacherComment'], 'Consistent')

    def test_unknown_report_type(self):
        with self.assertRaises(ValueError):
            self.builder(report_type='end-only')

    def test_later_duplicate_result_wins(self):
        results = [self.result(self.maths, 'END', 40), self.result(self.maths, 'END', 88)]
        card = self.builder().build(self.student, results)
        self.assertEqual(card['subjects'][0]['endTerm']['marks'], 88)

    def test_malformed_marks_count_as_zero(self):
        results = [self.result(self.maths, 'END', 'abc'), self.result(self.english, 'END', 50, total_marks=0)]
        card = self.builder().build(self.student, results)
        self.assertEqual(card['subjects'][0]['endTerm']['marks'], 0)
        self.assertEqual(card['subjects'][1]['endTerm']['percentage'], 0)
        self.assertEqual(card['performance']['endTerm']['average'], 50)

    def test_subject_positions_and_aggregate(self):
        results = [self.result(self.maths, 'END', 60), self.result(self.english, 'END', 80)]
        card = self.builder().build(self.student, results)
        self.assertEqual(card['subjects'][0]['endTerm']['position'], 2)
        self.assertEqual(card['subjects'][1]['endTerm']['position'], 1)
        self.assertEqual(card['performance']['endTerm']['aggregate'], 3)

    def test_conduct_defaults_and_attendance(self):
        self.student.discipline = 'Excellent'
        card = self.builder().build(self.student, attendance_records=[])
        self.assertEqual(card['conduct'], {
            'discipline': 'Excellent',
            'timeManagement': 'Good',
            'smartness': 'Good',
            'attendanceRemarks': 'Regular',
            'attendancePercentage': 100,
        })

    def test_comments_use_final_phase_average(self):
        class_bands = [CommentBand(min_percentage=Decimal(80), max_percentage=Decimal(100), comment='Brilliant')]
        head_bands = [CommentBand(min_percentage=Decimal(0), max_percentage=Decimal(50), comment='Try harder')]
        builder = self.builder(class_teacher_comments=class_bands, head_teacher_comments=head_bands)

        card = builder.build(self.student, [self.result(self.maths, 'MID', 10), self.result(self.maths, 'END', 85)])
        self.assertEqual(card['comments'], {
            'classTeacher': 'Brilliant',
            'headTeacher': 'No comment available',
        })

    def test_document_header(self):
        card = self.builder().build(self.student)
        self.assertEqual(card['student']['rollNum'], 'S007')
        self.assertEqual(card['student']['gender'], 'Male')
        self.assertIsNone(card['student']['class'])
        self.assertEqual(card['student']['year'], 2024)
        self.assertEqual(card['term']['nextTermStarts'], '2025-01-07')
        self.assertIsNone(card['term']['nextTermEnds'])
        self.assertEqual([g['grade'] for g in card['gradingScale']], ['A', 'B', 'C'])

    def test_class_positions(self):
        """Class position ranks final-phase averages; ties share a place."""
        other = Student(id=8, first_name='Efua', last_name='Addo', gender='F', admission_number='S008')
        third = Student(id=9, first_name='Kojo', last_name='Ansah', gender='M', admission_number='S009')
        results = {
            7: [self.result(self.maths, 'END', 70)],
            8: [self.result(self.maths, 'END', 90)],
            9: [self.result(self.maths, 'END', 70)],
        }
        cards = self.builder().build_class([self.student, other, third], results, {})

        self.assertEqual([c['classPosition'] for c in cards], [2, 1, 2])
        self.assertEqual(cards[0]['classSize'], 3)
        self.assertEqual(cards[0]['conduct']['attendancePercentage'], 100)


# =============================================================================
# MODELS
# =============================================================================

class BandModelTests(TenantTestCase):
    """Overlap validation for grading and comment bands."""

    def test_grade_scale_overlap_rejected(self):
        GradeScale.objects.create(grade_label='A', min_percentage=80, max_percentage=100)
        band = GradeScale(grade_label='B', min_percentage=70, max_percentage=80)
        with self.assertRaises(ValidationError):
            band.clean()

    def test_grade_scale_min_above_max(self):
        band = GradeScale(grade_label='B', min_percentage=70, max_percentage=60)
        with self.assertRaises(ValidationError):
            band.clean()

    def test_comment_bands_checked_per_kind(self):
        """Class and head teacher bands may share a range."""
        CommentBand.objects.create(kind='class_teacher', min_percentage=0, max_percentage=50, comment='a')
        head = CommentBand(kind='head_teacher', min_percentage=0, max_percentage=50, comment='b')
        head.clean()

        duplicate = CommentBand(kind='class_teacher', min_percentage=40, max_percentage=60, comment='c')
        with self.assertRaises(ValidationError):
            duplicate.clean()

    def test_seed_report_defaults(self):
        call_command('seed_report_defaults', stdout=StringIO())
        self.assertEqual(GradeScale.objects.count(), 9)
        self.assertEqual(CommentBand.objects.filter(kind='class_teacher').count(), 4)

        # Second run without --force leaves data alone
        GradeScale.objects.filter(grade_label='A1').update(interpretation='Changed')
        call_command('seed_report_defaults', stdout=StringIO())
        self.assertEqual(GradeScale.objects.get(grade_label='A1').interpretation, 'Changed')


# =============================================================================
# API
# =============================================================================

class GradebookApiTestCase(TenantTestCase):
    """
    Fixtures: one class (B7-A) taught Maths by its class teacher and English
    by a second teacher, two students, a parent of the first student, a term
    with a MID and END exam per subject and the default grading scale.
    """

    @classmethod
    def setup_tenant(cls, tenant):
        tenant.name = 'Accra Academy'

    def setUp(self):
        self.client = TenantClient(self.tenant)

        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.ama_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')
        self.kofi_user = User.objects.create_teacher(email='kofi@school.com', password='pass12345')
        self.student_user = User.objects.create_student(email='yaw@school.com', password='pass12345')
        self.other_student_user = User.objects.create_student(email='efua@school.com', password='pass12345')
        self.parent_user = User.objects.create_parent(email='parent@example.com', password='pass12345')

        self.ama = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T1', user=self.ama_user)
        self.kofi = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T2', user=self.kofi_user)

        self.class_obj = Class.objects.create(level_type='jhs', level_number=1, section='A', class_teacher=self.ama)
        self.maths = Subject.objects.create(name='Mathematics', short_name='MATH')
        self.english = Subject.objects.create(name='English Language', short_name='ENG')
        ClassSubject.objects.create(class_assigned=self.class_obj, subject=self.maths, teacher=self.ama)
        ClassSubject.objects.create(class_assigned=self.class_obj, subject=self.english, teacher=self.kofi)

        self.yaw = Student.objects.create(
            first_name='Yaw', last_name='Darko', gender='M', admission_number='S001',
            current_class=self.class_obj, user=self.student_user,
        )
        self.efua = Student.objects.create(
            first_name='Efua', last_name='Addo', gender='F', admission_number='S002',
            current_class=self.class_obj, user=self.other_student_user,
        )
        guardian = Guardian.objects.create(user=self.parent_user, full_name='Kwabena Darko')
        guardian.students.add(self.yaw)

        year = AcademicYear.objects.create(name='2024/2025', start_date=date(2024, 9, 1),
                                           end_date=date(2025, 7, 31), is_current=True)
        self.term = Term.objects.create(
            academic_year=year, name='First Term', term_number=1,
            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13),
            next_term_starts=date(2025, 1, 7), next_term_ends=date(2025, 4, 4),
        )

        call_command('seed_report_defaults', stdout=StringIO())

        self.exams = {}
        for subject in (self.maths, self.english):
            for exam_type in ('MID', 'END'):
                self.exams[(subject.short_name, exam_type)] = Exam.objects.create(
                    term=self.term, class_assigned=self.class_obj, subject=subject, exam_type=exam_type,
                )

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}

    def mark(self, student, subject, exam_type, marks):
        return ExamResult.objects.create(
            exam=self.exams[(subject.short_name, exam_type)], student=student, marks_obtained=marks
        )


class StudentReportCardApiTests(GradebookApiTestCase):

    def url(self, student=None):
        return f'/api/students/{(student or self.yaw).pk}/report-card/'

    def test_full_report_card(self):
        self.mark(self.yaw, self.maths, 'MID', 70)
        self.mark(self.yaw, self.maths, 'END', 90)
        self.mark(self.yaw, self.english, 'END', 60)

        session = AttendanceSession.objects.create(class_assigned=self.class_obj, date=date(2024, 10, 1))
        AttendanceRecord.objects.create(session=session, student=self.yaw, status='P')
        session = AttendanceSession.objects.create(class_assigned=self.class_obj, date=date(2024, 10, 2))
        AttendanceRecord.objects.create(session=session, student=self.yaw, status='A')
        # Outside the term: ignored
        session = AttendanceSession.objects.create(class_assigned=self.class_obj, date=date(2025, 2, 1))
        AttendanceRecord.objects.create(session=session, student=self.yaw, status='A')

        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        card = response.json()

        self.assertEqual(card['student']['name'], 'Yaw Darko')
        self.assertEqual(card['student']['class'], 'B7-A')
        self.assertEqual(card['school']['name'], 'Accra Academy')
        self.assertEqual(card['term']['nextTermEnds'], '2025-04-04')

        english, maths = card['subjects']
        self.assertEqual(maths['endTerm'], {'marks': 90, 'grade': 'A1', 'percentage': 90, 'position': 1})
        self.assertEqual(maths['teacherComment'], 'Improved')
        self.assertEqual(maths['teacherInitials'], 'A.M')
        self.assertEqual(english['midTerm']['grade'], 'N/A')

        self.assertEqual(card['performance']['midTerm']['average'], 70)
        self.assertEqual(card['performance']['endTerm']['average'], 75)
        self.assertEqual(card['performance']['endTerm']['grade'], 'B2')
        self.assertEqual(card['conduct']['attendancePercentage'], 50)
        self.assertEqual(card['comments']['classTeacher'], 'A commendable performance. Keep working hard!')
        self.assertEqual(len(card['gradingScale']), 9)

    def test_term_id_required(self):
        response = self.client.get(self.url(), **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Term ID is required'})

    def test_invalid_report_type(self):
        response = self.client.get(self.url(), {'termId': self.term.pk, 'reportType': 'weekly'},
                                   **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)

    def test_edited_duplicate_mark_wins(self):
        """With two MID exams in one subject, the most recently edited mark is reported."""
        second_mid = Exam.objects.create(
            term=self.term, class_assigned=self.class_obj, subject=self.maths, exam_type='MID',
        )
        self.mark(self.yaw, self.maths, 'MID', 40)
        ExamResult.objects.create(exam=second_mid, student=self.yaw, marks_obtained=55)

        first_mid = self.exams[('MATH', 'MID')]
        self.client.post(f'/api/exams/{first_mid.pk}/marks/', {'results': [
            {'studentId': self.yaw.pk, 'marks': 65},
        ]}, content_type='application/json', **self.auth(self.admin))

        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.admin))
        maths = response.json()['subjects'][1]
        self.assertEqual(maths['midTerm']['marks'], 65)

    def test_bot_mid_report(self):
        response = self.client.get(self.url(), {'termId': self.term.pk, 'reportType': 'bot-mid'},
                                   **self.auth(self.admin))
        self.assertEqual(set(response.json()['performance']), {'botTerm', 'midTerm'})

    def test_unknown_student_and_term(self):
        response = self.client.get('/api/students/9999/report-card/', {'termId': self.term.pk},
                                   **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)
        response = self.client.get(self.url(), {'termId': 9999}, **self.auth(self.admin))
        self.assertEqual(response.json(), {'error': 'Term not found'})

    def test_requires_token(self):
        response = self.client.get(self.url(), {'termId': self.term.pk})
        self.assertEqual(response.status_code, 401)

    def test_student_reads_own_report_only(self):
        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.student_user))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.url(self.efua), {'termId': self.term.pk}, **self.auth(self.student_user))
        self.assertEqual(response.status_code, 403)

    def test_parent_reads_childs_report_only(self):
        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.parent_user))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.url(self.efua), {'termId': self.term.pk}, **self.auth(self.parent_user))
        self.assertEqual(response.status_code, 403)

    def test_subject_teacher_can_read(self):
        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.kofi_user))
        self.assertEqual(response.status_code, 200)


class ClassReportCardApiTests(GradebookApiTestCase):

    def url(self, suffix=''):
        return f'/api/classes/{self.class_obj.pk}/report-cards/{suffix}'

    def test_class_report_cards(self):
        self.mark(self.yaw, self.maths, 'END', 60)
        self.mark(self.efua, self.maths, 'END', 80)

        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertEqual(body['class']['name'], 'B7-A')
        self.assertEqual(body['school']['name'], 'Accra Academy')
        positions = {card['student']['rollNum']: card['classPosition'] for card in body['reportCards']}
        self.assertEqual(positions, {'S001': 2, 'S002': 1})

    def test_subject_teacher_is_not_class_teacher(self):
        response = self.client.get(self.url(), {'termId': self.term.pk}, **self.auth(self.kofi_user))
        self.assertEqual(response.status_code, 403)

    def test_export_broadsheet(self):
        self.mark(self.yaw, self.maths, 'END', 60)
        response = self.client.get(self.url('export/'), {'termId': self.term.pk}, **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment;', response['Content-Disposition'])

        wb = openpyxl.load_workbook(BytesIO(response.content))
        ws = wb.active
        self.assertEqual(ws.cell(row=2, column=1).value, 'Roll No.')
        self.assertEqual(ws.cell(row=3, column=1).value, 'S002')
        self.assertEqual(ws.cell(row=4, column=2).value, 'Yaw Darko')

    def test_export_requires_admin(self):
        response = self.client.get(self.url('export/'), {'termId': self.term.pk}, **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 403)

    def test_async_export_queues_job(self):
        with mock.patch('gradebook.tasks.export_class_broadsheet') as task:
            task.delay.return_value.id = 'job-123'
            response = self.client.get(self.url('export/'), {'termId': self.term.pk, 'async': '1'},
                                       **self.auth(self.admin))
        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json()['jobId'], 'job-123')
        task.delay.assert_called_once_with(self.class_obj.pk, self.term.pk, 'mid-end', self.tenant.schema_name)

    def test_export_task_stores_workbook(self):
        schema = self.tenant.schema_name
        with mock.patch('gradebook.tasks.default_storage') as storage:
            storage.save.return_value = 'stored.xlsx'
            result = export_class_broadsheet.apply(
                args=(self.class_obj.pk, self.term.pk, 'bot-mid', schema)
            ).get()

        self.assertEqual(result, {'success': True, 'path': 'stored.xlsx'})
        path = storage.save.call_args[0][0]
        self.assertTrue(path.startswith(f'exports/broadsheets/{schema}/broadsheet_B7-A'))
        self.assertTrue(path.endswith('_bot-mid.xlsx'))

    def test_export_task_unknown_class(self):
        result = export_class_broadsheet.apply(
            args=(9999, self.term.pk, 'mid-end', self.tenant.schema_name)
        ).get()
        self.assertFalse(result['success'])


class ExamApiTests(GradebookApiTestCase):

    def test_admin_creates_exam(self):
        response = self.client.post('/api/exams/', {
            'termId': self.term.pk, 'classId': self.class_obj.pk, 'subjectId': self.maths.pk,
            'examType': 'BOT', 'totalMarks': 50, 'date': '2024-09-20',
        }, content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['totalMarks'], 50)

    def test_exam_date_outside_term(self):
        response = self.client.post('/api/exams/', {
            'termId': self.term.pk, 'classId': self.class_obj.pk, 'subjectId': self.maths.pk,
            'examType': 'BOT', 'date': '2025-02-01',
        }, content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)

    def test_teacher_cannot_create_exam(self):
        response = self.client.post('/api/exams/', {}, content_type='application/json',
                                    **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 403)

    def test_filter_exams(self):
        response = self.client.get('/api/exams/', {'subjectId': self.maths.pk, 'examType': 'END'},
                                   **self.auth(self.ama_user))
        exams = response.json()['exams']
        self.assertEqual(len(exams), 1)
        self.assertEqual(exams[0]['examType'], 'END')

    def test_enter_marks(self):
        exam = self.exams[('MATH', 'END')]
        url = f'/api/exams/{exam.pk}/marks/'
        response = self.client.post(url, {'results': [
            {'studentId': self.yaw.pk, 'marks': 88},
            {'studentId': self.efua.pk, 'marks': 67.5, 'remarks': 'Good effort'},
        ]}, content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(ExamResult.objects.filter(exam=exam).count(), 2)

        # Resubmitting updates in place
        self.client.post(url, {'results': [{'studentId': self.yaw.pk, 'marks': 91}]},
                         content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(ExamResult.objects.get(exam=exam, student=self.yaw).marks_obtained, Decimal('91'))
        self.assertEqual(ExamResult.objects.filter(exam=exam).count(), 2)

    def test_enter_marks_with_string_ids(self):
        """Student ids sent as strings are accepted."""
        exam = self.exams[('MATH', 'END')]
        response = self.client.post(f'/api/exams/{exam.pk}/marks/', {'results': [
            {'studentId': str(self.yaw.pk), 'marks': '72.5'},
        ]}, content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(ExamResult.objects.get(exam=exam, student=self.yaw).marks_obtained, Decimal('72.5'))

    def test_non_numeric_student_id_rejected(self):
        """A boolean is not a student id, even though True == 1."""
        exam = self.exams[('MATH', 'END')]
        for student_id in (True, 'abc', None):
            with self.subTest(student_id=student_id):
                response = self.client.post(f'/api/exams/{exam.pk}/marks/', {'results': [
                    {'studentId': student_id, 'marks': 50},
                ]}, content_type='application/json', **self.auth(self.admin))
                self.assertEqual(response.status_code, 400)
                self.assertIn('student_id', response.json()['details']['results[0]'])
        self.assertFalse(ExamResult.objects.exists())

    def test_student_outside_class_rejected(self):
        other_class = Class.objects.create(level_type='jhs', level_number=2, section='A')
        outsider = Student.objects.create(
            first_name='Kwame', last_name='Owusu', gender='M', admission_number='S099',
            current_class=other_class,
        )
        exam = self.exams[('MATH', 'END')]
        response = self.client.post(f'/api/exams/{exam.pk}/marks/', {'results': [
            {'studentId': outsider.pk, 'marks': 50},
        ]}, content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()['details']['results[0]']['student_id'],
            ['Student is not in this class.'],
        )

    def test_marks_above_total_rejected(self):
        exam = self.exams[('MATH', 'END')]
        response = self.client.post(f'/api/exams/{exam.pk}/marks/', {'results': [
            {'studentId': self.yaw.pk, 'marks': 101},
        ]}, content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertFalse(ExamResult.objects.exists())

    def test_other_subject_teacher_cannot_enter_marks(self):
        exam = self.exams[('MATH', 'END')]
        response = self.client.post(f'/api/exams/{exam.pk}/marks/', {'results': [
            {'studentId': self.yaw.pk, 'marks': 50},
        ]}, content_type='application/json', **self.auth(self.kofi_user))
        self.assertEqual(response.status_code, 403)

    def test_list_marks(self):
        exam = self.exams[('ENG', 'MID')]
        self.mark(self.efua, self.english, 'MID', 55)
        response = self.client.get(f'/api/exams/{exam.pk}/marks/', **self.auth(self.kofi_user))
        marks = {r['rollNum']: r['marks'] for r in response.json()['results']}
        self.assertEqual(marks, {'S002': 55.0, 'S001': None})


class SetupApiTests(GradebookApiTestCase):

    def test_overlapping_grading_rejected(self):
        response = self.client.post('/api/gradings/', {'from': 75, 'to': 85, 'grade': 'X1'},
                                    content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)

    def test_update_grading(self):
        scale = GradeScale.objects.get(grade_label='A1')
        response = self.client.put(f'/api/gradings/{scale.pk}/', {'interpretation': 'Distinction'},
                                   content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['interpretation'], 'Distinction')

    def test_teacher_cannot_change_gradings(self):
        scale = GradeScale.objects.get(grade_label='A1')
        response = self.client.delete(f'/api/gradings/{scale.pk}/', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 403)

    def test_gradings_listed_highest_first(self):
        response = self.client.get('/api/gradings/', **self.auth(self.student_user))
        grades = [g['grade'] for g in response.json()['gradings']]
        self.assertEqual(grades[0], 'A1')
        self.assertEqual(grades[-1], 'F9')

    def test_teacher_writes_class_teacher_comment(self):
        CommentBand.objects.filter(kind='class_teacher').delete()
        response = self.client.post('/api/comments/class-teacher/', {
            'from': 0, 'to': 100, 'comment': 'Keep going',
        }, content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 201)
        band = CommentBand.objects.get(kind='class_teacher')
        self.assertEqual(band.teacher, self.ama)

    def test_teacher_cannot_write_head_teacher_comment(self):
        response = self.client.post('/api/comments/head-teacher/', {
            'from': 0, 'to': 10, 'comment': 'x',
        }, content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 403)

    def test_teacher_cannot_edit_others_comment(self):
        band = CommentBand.objects.filter(kind='class_teacher').first()
        response = self.client.put(f'/api/comments/class-teacher/{band.pk}/', {'comment': 'Mine now'},
                                   content_type='application/json', **self.auth(self.ama_user))
        self.assertEqual(response.status_code, 403)

    def test_unknown_comment_kind(self):
        response = self.client.get('/api/comments/janitor/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)
