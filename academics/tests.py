"""
Tests for the academics app.

Focuses on:
- Class name generation
- Class and roster listing per role
- Class, subject and allocation CRUD
- Attendance register upserts
"""
from datetime import date

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import SimpleTestCase
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from accounts.models import ApiToken
from academics.models import Class, Subject, ClassSubject, AttendanceSession, AttendanceRecord
from students.models import Student, Guardian
from teachers.models import Teacher

User = get_user_model()


class ClassNameTests(TenantTestCase):
    """Class names are generated on save."""

    def test_generated_names(self):
        cases = [
            ('kg', 2, 'A', 'KG2-A'),
            ('primary', 3, 'B', 'B3-B'),
            ('jhs', 2, 'A', 'B8-A'),
            ('shs', 1, 'C', 'SHS1-C'),
        ]
        for level_type, number, section, expected in cases:
            class_obj = Class.objects.create(level_type=level_type, level_number=number, section=section)
            self.assertEqual(class_obj.name, expected)


class AcademicsApiTestCase(TenantTestCase):
    """Shared fixtures: an admin, an assigned teacher, an unassigned teacher and a class."""

    def setUp(self):
        self.client = TenantClient(self.tenant)

        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')
        self.other_user = User.objects.create_teacher(email='kofi@school.com', password='pass12345')
        self.student_user = User.objects.create_student(email='yaw@school.com', password='pass12345')

        self.teacher = Teacher.objects.create(
            first_name='Ama', last_name='Mensah', staff_id='TCH-001', user=self.teacher_user
        )
        Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='TCH-002', user=self.other_user)

        self.class_obj = Class.objects.create(
            level_type='jhs', level_number=1, section='A', class_teacher=self.teacher
        )
        self.other_class = Class.objects.create(level_type='jhs', level_number=2, section='A')
        self.maths = Subject.objects.create(name='Mathematics', short_name='MATH')
        ClassSubject.objects.create(class_assigned=self.class_obj, subject=self.maths, teacher=self.teacher)

        self.student_a = Student.objects.create(
            first_name='Yaw', last_name='Darko', gender='M', admission_number='S001',
            current_class=self.class_obj, user=self.student_user,
        )
        self.student_b = Student.objects.create(
            first_name='Efua', last_name='Addo', gender='F', admission_number='S002',
            current_class=self.class_obj,
        )

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}


class ClassApiTests(AcademicsApiTestCase):

    def test_admin_sees_all_classes(self):
        response = self.client.get('/api/classes/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['classes']), 2)

    def test_teacher_sees_assigned_classes(self):
        """A teacher who is class and subject teacher sees the class once."""
        response = self.client.get('/api/classes/', **self.auth(self.teacher_user))
        classes = response.json()['classes']
        self.assertEqual([c['name'] for c in classes], ['B7-A'])
        self.assertEqual(classes[0]['studentCount'], 2)

    def test_student_cannot_list_classes(self):
        response = self.client.get('/api/classes/', **self.auth(self.student_user))
        self.assertEqual(response.status_code, 403)

    def test_class_roster(self):
        response = self.client.get(f'/api/classes/{self.class_obj.pk}/students/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 200)
        roll_numbers = [s['rollNum'] for s in response.json()['students']]
        self.assertEqual(roll_numbers, ['S002', 'S001'])

    def test_roster_forbidden_for_unassigned_teacher(self):
        response = self.client.get(f'/api/classes/{self.class_obj.pk}/students/', **self.auth(self.other_user))
        self.assertEqual(response.status_code, 403)

    def test_roster_unknown_class(self):
        response = self.client.get('/api/classes/9999/students/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)


class AttendanceApiTests(AcademicsApiTestCase):

    def post_register(self, user, records, day='2024-10-01'):
        return self.client.post('/api/attendance/', {
            'classId': self.class_obj.pk,
            'date': day,
            'records': records,
        }, content_type='application/json', **self.auth(user))

    def test_record_register(self):
        response = self.post_register(self.teacher_user, [
            {'studentId': self.student_a.pk, 'status': 'P'},
            {'studentId': self.student_b.pk, 'status': 'A', 'remarks': 'Sick'},
        ])
        self.assertEqual(response.status_code, 200)
        session = AttendanceSession.objects.get(class_assigned=self.class_obj, date=date(2024, 10, 1))
        self.assertEqual(session.created_by, self.teacher)
        self.assertEqual(session.records.get(student=self.student_b).remarks, 'Sick')

    def test_resubmitting_updates_in_place(self):
        """A second submission for the same date updates rather than duplicates."""
        self.post_register(self.teacher_user, [{'studentId': self.student_a.pk, 'status': 'P'}])
        self.post_register(self.teacher_user, [{'studentId': self.student_a.pk, 'status': 'L'}])

        records = AttendanceRecord.objects.filter(student=self.student_a)
        self.assertEqual(records.count(), 1)
        self.assertEqual(records.get().status, 'L')

    def test_invalid_status_rejected(self):
        response = self.post_register(self.teacher_user, [{'studentId': self.student_a.pk, 'status': 'E'}])
        self.assertEqual(response.status_code, 400)
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_student_outside_class_rejected(self):
        outsider = Student.objects.create(
            first_name='Kojo', last_name='Ansah', gender='M', admission_number='S003',
            current_class=self.other_class,
        )
        response = self.post_register(self.admin, [{'studentId': outsider.pk, 'status': 'P'}])
        self.assertEqual(response.status_code, 400)

    def test_read_register(self):
        self.post_register(self.admin, [{'studentId': self.student_a.pk, 'status': 'A'}])
        response = self.client.get(
            '/api/attendance/', {'classId': self.class_obj.pk, 'date': '2024-10-01'},
            **self.auth(self.teacher_user)
        )
        self.assertEqual(response.status_code, 200)
        statuses = {r['studentId']: r['status'] for r in response.json()['records']}
        self.assertEqual(statuses, {self.student_a.pk: 'A', self.student_b.pk: None})

    def test_read_register_requires_class_and_date(self):
        response = self.client.get('/api/attendance/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertIn('class_id', response.json()['details'])

    def test_unassigned_teacher_cannot_record(self):
        response = self.post_register(self.other_user, [{'studentId': self.student_a.pk, 'status': 'P'}])
        self.assertEqual(response.status_code, 403)


class ClassCrudApiTests(AcademicsApiTestCase):
    """Class create/update/delete and subject allocation."""

    def post_json(self, url, data, user):
        return self.client.post(url, data, content_type='application/json', **self.auth(user))

    def put_json(self, url, data, user):
        return self.client.put(url, data, content_type='application/json', **self.auth(user))

    def test_admin_creates_class(self):
        response = self.post_json('/api/classes/', {
            'levelType': 'primary', 'levelNumber': 5, 'section': 'b', 'classTeacherId': str(self.teacher.pk),
        }, self.admin)
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['name'], 'B5-B')
        self.assertTrue(data['isActive'])
        self.assertEqual(data['classTeacher']['name'], 'Ama Mensah')

    def test_duplicate_class_rejected(self):
        response = self.post_json('/api/classes/', {
            'levelType': 'jhs', 'levelNumber': 1, 'section': 'A',
        }, self.admin)
        self.assertEqual(response.status_code, 400)
        self.assertIn('__all__', response.json()['details'])

    def test_teacher_cannot_create_class(self):
        response = self.post_json('/api/classes/', {'levelNumber': 5, 'section': 'A'}, self.teacher_user)
        self.assertEqual(response.status_code, 403)

    def test_class_detail_lists_allocations(self):
        response = self.client.get(f'/api/classes/{self.class_obj.pk}/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 200)
        subjects = response.json()['subjects']
        self.assertEqual(subjects[0]['subject']['shortName'], 'MATH')
        self.assertEqual(subjects[0]['teacher']['name'], 'Ama Mensah')

    def test_partial_update_keeps_level(self):
        response = self.put_json(f'/api/classes/{self.class_obj.pk}/', {'section': 'C'}, self.admin)
        self.assertEqual(response.status_code, 200)
        self.class_obj.refresh_from_db()
        self.assertEqual(self.class_obj.name, 'B7-C')
        self.assertEqual(self.class_obj.class_teacher, self.teacher)

    def test_delete_class_with_students_rejected(self):
        response = self.client.delete(f'/api/classes/{self.class_obj.pk}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertTrue(Class.objects.filter(pk=self.class_obj.pk).exists())

    def test_delete_empty_class(self):
        response = self.client.delete(f'/api/classes/{self.other_class.pk}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Class.objects.filter(pk=self.other_class.pk).exists())

    def test_unknown_class(self):
        response = self.client.get('/api/classes/9999/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)

    def test_allocate_subject(self):
        english = Subject.objects.create(name='English Language', short_name='ENG')
        response = self.post_json(f'/api/classes/{self.other_class.pk}/subjects/', {
            'subjectId': english.pk, 'teacherId': str(self.teacher.pk),
        }, self.admin)
        self.assertEqual(response.status_code, 201)
        allocation = ClassSubject.objects.get(class_assigned=self.other_class, subject=english)
        self.assertEqual(allocation.teacher, self.teacher)

    def test_reallocating_subject_replaces_teacher(self):
        kofi = Teacher.objects.get(staff_id='TCH-002')
        response = self.post_json(f'/api/classes/{self.class_obj.pk}/subjects/', {
            'subjectId': self.maths.pk, 'teacherId': str(kofi.pk),
        }, self.admin)
        self.assertEqual(response.status_code, 200)
        allocations = ClassSubject.objects.filter(class_assigned=self.class_obj, subject=self.maths)
        self.assertEqual(allocations.count(), 1)
        self.assertEqual(allocations.get().teacher, kofi)

    def test_allocate_unknown_subject(self):
        response = self.post_json(f'/api/classes/{self.class_obj.pk}/subjects/', {'subjectId': 9999}, self.admin)
        self.assertEqual(response.status_code, 400)
        self.assertIn('subject', response.json()['details'])

    def test_remove_allocation(self):
        url = f'/api/classes/{self.class_obj.pk}/subjects/{self.maths.pk}/'
        response = self.client.delete(url, **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(ClassSubject.objects.filter(class_assigned=self.class_obj).exists())

        response = self.client.delete(url, **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)


class SubjectApiTests(AcademicsApiTestCase):

    def test_any_user_lists_subjects(self):
        response = self.client.get('/api/subjects/', **self.auth(self.student_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['shortName'] for s in response.json()['subjects']], ['MATH'])

    def test_admin_creates_subject(self):
        response = self.client.post('/api/subjects/', {'name': 'Social Studies', 'shortName': 'soc'},
                                    content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['shortName'], 'SOC')
        self.assertTrue(response.json()['isCore'])

    def test_missing_name_rejected(self):
        response = self.client.post('/api/subjects/', {'shortName': 'SOC'},
                                    content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.json()['details'])

    def test_teacher_cannot_update_subject(self):
        response = self.client.put(f'/api/subjects/{self.maths.pk}/', {'isCore': False},
                                   content_type='application/json', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 403)

    def test_partial_update(self):
        response = self.client.put(f'/api/subjects/{self.maths.pk}/', {'isCore': False},
                                   content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.maths.refresh_from_db()
        self.assertFalse(self.maths.is_core)
        self.assertEqual(self.maths.name, 'Mathematics')

    def test_delete_subject(self):
        response = self.client.delete(f'/api/subjects/{self.maths.pk}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(ClassSubject.objects.exists())


class AdminRegistrationTests(SimpleTestCase):

    def test_school_records_in_admin(self):
        for model in (Class, Subject, ClassSubject, Student, Guardian, Teacher):
            with self.subTest(model=model.__name__):
                self.assertTrue(admin.site.is_registered(model))
