import uuid
from datetime import date

from django.contrib.auth import get_user_model
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from accounts.models import ApiToken, Role
from academics.models import Class, Subject, ClassSubject
from teachers.models import Teacher

User = get_user_model()


class TeacherModelTests(TenantTestCase):
    """Tests for the Teacher model."""

    def _create_teacher(self, **kwargs):
        defaults = {
            'first_name': 'Kwame',
            'last_name': 'Asante',
            'gender': 'M',
            'staff_id': 'TCH-001',
            'employment_date': date(2020, 9, 1),
        }
        defaults.update(kwargs)
        return Teacher.objects.create(**defaults)

    def test_full_name(self):
        teacher = self._create_teacher(middle_name='Kwesi')
        self.assertEqual(teacher.full_name, 'Kwame Kwesi Asante')

    def test_str_includes_title(self):
        teacher = self._create_teacher(title='DR')
        self.assertEqual(str(teacher), 'Dr. Kwame Asante')

    def test_user_link(self):
        """The linked user reaches the profile through teacher_profile."""
        user = User.objects.create_teacher(email='kwame@school.com', password='pass12345')
        teacher = self._create_teacher(user=user)
        self.assertEqual(user.teacher_profile, teacher)


class TeacherAssignmentTests(TenantTestCase):
    """Tests for Teacher.teaches."""

    def setUp(self):
        self.teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='TCH-002')
        self.other = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='TCH-003')
        self.class_obj = Class.objects.create(level_type='primary', level_number=4, section='A')
        self.maths = Subject.objects.create(name='Mathematics', short_name='MATH')
        self.english = Subject.objects.create(name='English Language', short_name='ENG')
        ClassSubject.objects.create(class_assigned=self.class_obj, subject=self.maths, teacher=self.teacher)

    def test_subject_teacher_teaches_class(self):
        self.assertTrue(self.teacher.teaches(self.class_obj))
        self.assertTrue(self.teacher.teaches(self.class_obj, self.maths))
        self.assertFalse(self.teacher.teaches(self.class_obj, self.english))

    def test_class_teacher_teaches_class(self):
        self.class_obj.class_teacher = self.other
        self.class_obj.save()
        self.assertTrue(self.other.teaches(self.class_obj))
        self.assertFalse(self.other.teaches(self.class_obj, self.maths))

    def test_unassigned_teacher(self):
        self.assertFalse(self.other.teaches(self.class_obj))


class TeacherApiTests(TenantTestCase):
    """Tests for /api/teachers/."""

    def setUp(self):
        self.client = TenantClient(self.tenant)
        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')
        self.parent_user = User.objects.create_parent(email='parent@example.com', password='pass12345')
        self.teacher = Teacher.objects.create(
            first_name='Ama', last_name='Mensah', staff_id='TCH-001', user=self.teacher_user
        )

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}

    def post_teacher(self, data, user=None):
        return self.client.post('/api/teachers/', data, content_type='application/json',
                                **self.auth(user or self.admin))

    def test_create_teacher_with_login(self):
        response = self.post_teacher({
            'firstName': 'Kofi', 'lastName': 'Boateng', 'staffId': 'TCH-002',
            'email': 'kofi@school.com', 'password': 'kofipass123',
        })
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['hasAccount'])

        teacher = Teacher.objects.get(staff_id='TCH-002')
        self.assertEqual(teacher.title, 'MR')
        self.assertEqual(teacher.user.role, Role.TEACHER)
        self.assertTrue(teacher.user.check_password('kofipass123'))

    def test_create_teacher_without_login(self):
        response = self.post_teacher({'firstName': 'Kofi', 'lastName': 'Boateng', 'staffId': 'TCH-002'})
        self.assertEqual(response.status_code, 201)
        self.assertIsNone(Teacher.objects.get(staff_id='TCH-002').user)

    def test_taken_email_creates_nothing(self):
        response = self.post_teacher({
            'firstName': 'Kofi', 'lastName': 'Boateng', 'staffId': 'TCH-002',
            'email': 'ama@school.com', 'password': 'kofipass123',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['details'])
        self.assertFalse(Teacher.objects.filter(staff_id='TCH-002').exists())

    def test_duplicate_staff_id_rejected(self):
        response = self.post_teacher({'firstName': 'Kofi', 'lastName': 'Boateng', 'staffId': 'TCH-001'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('staff_id', response.json()['details'])

    def test_teacher_cannot_create(self):
        response = self.post_teacher({'firstName': 'Kofi', 'lastName': 'Boateng', 'staffId': 'TCH-002'},
                                     user=self.teacher_user)
        self.assertEqual(response.status_code, 403)

    def test_parent_cannot_list(self):
        response = self.client.get('/api/teachers/', **self.auth(self.parent_user))
        self.assertEqual(response.status_code, 403)

    def test_detail_lists_assignments(self):
        class_obj = Class.objects.create(level_type='primary', level_number=4, section='A',
                                         class_teacher=self.teacher)
        maths = Subject.objects.create(name='Mathematics', short_name='MATH')
        ClassSubject.objects.create(class_assigned=class_obj, subject=maths, teacher=self.teacher)

        response = self.client.get(f'/api/teachers/{self.teacher.pk}/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual([c['name'] for c in data['classes']], ['B4-A'])
        self.assertEqual(data['subjects'], [{'classId': class_obj.pk, 'className': 'B4-A', 'subject': 'Mathematics'}])

    def test_partial_update(self):
        response = self.client.put(f'/api/teachers/{self.teacher.pk}/', {'title': 'DR'},
                                   content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.teacher.refresh_from_db()
        self.assertEqual(str(self.teacher), 'Dr. Ama Mensah')
        self.assertEqual(self.teacher.staff_id, 'TCH-001')

    def test_delete_removes_login(self):
        response = self.client.delete(f'/api/teachers/{self.teacher.pk}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Teacher.objects.exists())
        self.assertFalse(User.objects.filter(email='ama@school.com').exists())

    def test_unknown_teacher(self):
        response = self.client.get(f'/api/teachers/{uuid.uuid4()}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)
