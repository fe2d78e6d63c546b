from django.contrib.auth import get_user_model
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from accounts.models import ApiToken, Role
from academics.models import Class
from students.models import Student, Guardian
from teachers.models import Teacher

User = get_user_model()


class StudentModelTests(TenantTestCase):
    """Tests for the Student and Guardian models."""

    def test_full_name_with_other_names(self):
        student = Student.objects.create(
            first_name='Yaw', other_names='Kwaku', last_name='Darko', gender='M', admission_number='S001'
        )
        self.assertEqual(student.full_name, 'Yaw Kwaku Darko')
        self.assertEqual(str(student), 'Yaw Kwaku Darko (S001)')

    def test_conduct_blank_by_default(self):
        """Unassessed conduct is stored blank; report cards apply the defaults."""
        student = Student.objects.create(first_name='Yaw', last_name='Darko', gender='M', admission_number='S001')
        self.assertEqual(student.conduct_to_dict(), {
            'discipline': '', 'timeManagement': '', 'smartness': '', 'attendanceRemarks': '',
        })
        self.assertIsNone(student.photo_url)

    def test_guardian_links_students(self):
        user = User.objects.create_parent(email='parent@example.com', password='pass12345')
        student = Student.objects.create(first_name='Yaw', last_name='Darko', gender='M', admission_number='S001')
        guardian = Guardian.objects.create(user=user, full_name='Kwabena Darko', relationship='father')
        guardian.students.add(student)

        self.assertEqual(user.guardian_profile, guardian)
        self.assertIn(guardian, student.guardians.all())


class ConductApiTests(TenantTestCase):
    """Tests for PUT /api/students/<id>/conduct/."""

    def setUp(self):
        self.client = TenantClient(self.tenant)
        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')
        self.other_user = User.objects.create_teacher(email='kofi@school.com', password='pass12345')
        self.parent_user = User.objects.create_parent(email='parent@example.com', password='pass12345')

        teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='TCH-001',
                                         user=self.teacher_user)
        Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='TCH-002', user=self.other_user)
        class_obj = Class.objects.create(level_type='primary', level_number=6, section='A', class_teacher=teacher)
        self.student = Student.objects.create(
            first_name='Yaw', last_name='Darko', gender='M', admission_number='S001', current_class=class_obj
        )
        self.url = f'/api/students/{self.student.pk}/conduct/'

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}

    def test_class_teacher_updates_conduct(self):
        response = self.client.put(self.url, {'discipline': 'Excellent', 'timeManagement': 'Punctual'},
                                   content_type='application/json', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['conduct']['discipline'], 'Excellent')

        self.student.refresh_from_db()
        self.assertEqual(self.student.time_management, 'Punctual')
        self.assertEqual(self.student.smartness, '')

    def test_partial_update_keeps_existing_values(self):
        self.student.smartness = 'Neat'
        self.student.save()
        self.client.put(self.url, {'discipline': 'Good'}, content_type='application/json',
                        **self.auth(self.admin))
        self.student.refresh_from_db()
        self.assertEqual(self.student.smartness, 'Neat')

    def test_value_too_long(self):
        response = self.client.put(self.url, {'discipline': 'x' * 51}, content_type='application/json',
                                   **self.auth(self.admin))
        self.assertEqual(response.status_code, 400)

    def test_parent_forbidden(self):
        response = self.client.put(self.url, {'discipline': 'Good'}, content_type='application/json',
                                   **self.auth(self.parent_user))
        self.assertEqual(response.status_code, 403)

    def test_unassigned_teacher_forbidden(self):
        response = self.client.put(self.url, {'discipline': 'Good'}, content_type='application/json',
                                   **self.auth(self.other_user))
        self.assertEqual(response.status_code, 403)

    def test_unknown_student(self):
        response = self.client.put('/api/students/9999/conduct/', {}, content_type='application/json',
                                   **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)

    def test_wrong_method(self):
        response = self.client.get(self.url, **self.auth(self.admin))
        self.assertEqual(response.status_code, 405)


class StudentApiTests(TenantTestCase):
    """Tests for /api/students/ and /api/students/<id>/."""

    def setUp(self):
        self.client = TenantClient(self.tenant)
        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')

        teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='TCH-001',
                                         user=self.teacher_user)
        self.class_obj = Class.objects.create(level_type='primary', level_number=6, section='A',
                                              class_teacher=teacher)
        self.other_class = Class.objects.create(level_type='primary', level_number=5, section='A')
        self.student = Student.objects.create(
            first_name='Yaw', last_name='Darko', gender='M', admission_number='S001', current_class=self.class_obj
        )
        self.outsider = Student.objects.create(
            first_name='Kojo', last_name='Ansah', gender='M', admission_number='S002', current_class=self.other_class
        )

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}

    def post_student(self, data, user=None):
        return self.client.post('/api/students/', data, content_type='application/json',
                                **self.auth(user or self.admin))

    def test_admin_lists_by_class(self):
        response = self.client.get('/api/students/', {'classId': self.other_class.pk}, **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['rollNum'] for s in response.json()['students']], ['S002'])

    def test_teacher_sees_own_classes_only(self):
        response = self.client.get('/api/students/', **self.auth(self.teacher_user))
        self.assertEqual([s['rollNum'] for s in response.json()['students']], ['S001'])

    def test_enrol_student_with_login(self):
        response = self.post_student({
            'firstName': 'Efua', 'lastName': 'Addo', 'gender': 'F', 'rollNum': 'S003',
            'classId': self.class_obj.pk, 'email': 'efua@school.com', 'password': 'efuapass123',
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['status'], 'active')

        student = Student.objects.get(admission_number='S003')
        self.assertEqual(student.current_class, self.class_obj)
        self.assertEqual(student.user.role, Role.STUDENT)

    def test_duplicate_roll_number_rejected(self):
        response = self.post_student({'firstName': 'Efua', 'lastName': 'Addo', 'gender': 'F', 'rollNum': 'S001'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['details']['admission_number'],
                         ['A student with this roll number already exists.'])

    def test_short_password_creates_nothing(self):
        response = self.post_student({
            'firstName': 'Efua', 'lastName': 'Addo', 'gender': 'F', 'rollNum': 'S003',
            'email': 'efua@school.com', 'password': 'short',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.json()['details'])
        self.assertFalse(Student.objects.filter(admission_number='S003').exists())

    def test_teacher_cannot_enrol(self):
        response = self.post_student({'firstName': 'Efua', 'lastName': 'Addo', 'gender': 'F', 'rollNum': 'S003'},
                                     user=self.teacher_user)
        self.assertEqual(response.status_code, 403)

    def test_teacher_reads_student_in_own_class(self):
        response = self.client.get(f'/api/students/{self.student.pk}/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['firstName'], 'Yaw')

        response = self.client.get(f'/api/students/{self.outsider.pk}/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 403)

    def test_move_student_to_another_class(self):
        response = self.client.put(f'/api/students/{self.student.pk}/', {'classId': self.other_class.pk},
                                   content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.student.refresh_from_db()
        self.assertEqual(self.student.current_class, self.other_class)
        self.assertEqual(self.student.admission_number, 'S001')

    def test_delete_student(self):
        response = self.client.delete(f'/api/students/{self.student.pk}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Student.objects.filter(pk=self.student.pk).exists())

    def test_unknown_student(self):
        response = self.client.get('/api/students/9999/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 404)


class GuardianApiTests(TenantTestCase):
    """Tests for /api/parents/."""

    def setUp(self):
        self.client = TenantClient(self.tenant)
        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher_user = User.objects.create_teacher(email='ama@school.com', password='pass12345')
        self.student = Student.objects.create(first_name='Yaw', last_name='Darko', gender='M',
                                              admission_number='S001')
        self.sibling = Student.objects.create(first_name='Esi', last_name='Darko', gender='F',
                                              admission_number='S002')

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=user).key}'}

    def create_parent(self, **extra):
        data = {
            'name': 'Kwabena Darko', 'relationship': 'father', 'studentIds': [self.student.pk],
            'email': 'kwabena@example.com', 'password': 'parentpass123',
        }
        data.update(extra)
        return self.client.post('/api/parents/', data, content_type='application/json', **self.auth(self.admin))

    def test_create_parent_with_children(self):
        response = self.create_parent()
        self.assertEqual(response.status_code, 201)
        self.assertEqual([s['rollNum'] for s in response.json()['students']], ['S001'])

        guardian = Guardian.objects.get(full_name='Kwabena Darko')
        self.assertEqual(guardian.user.role, Role.PARENT)
        self.assertIn(guardian, self.student.guardians.all())

    def test_login_required_for_parent(self):
        response = self.create_parent(email=None, password=None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['details']), {'email', 'password'})
        self.assertFalse(Guardian.objects.exists())

    def test_unknown_student_rejected(self):
        response = self.create_parent(studentIds=[9999])
        self.assertEqual(response.status_code, 400)
        self.assertIn('students', response.json()['details'])

    def test_teacher_forbidden(self):
        response = self.client.get('/api/parents/', **self.auth(self.teacher_user))
        self.assertEqual(response.status_code, 403)

    def test_update_replaces_children_and_keeps_name(self):
        guardian_id = self.create_parent().json()['id']
        response = self.client.put(f'/api/parents/{guardian_id}/', {'studentIds': [self.sibling.pk]},
                                   content_type='application/json', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], 'Kwabena Darko')
        self.assertEqual([s['rollNum'] for s in response.json()['students']], ['S002'])

    def test_delete_removes_login(self):
        guardian_id = self.create_parent().json()['id']
        response = self.client.delete(f'/api/parents/{guardian_id}/', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Guardian.objects.exists())
        self.assertFalse(User.objects.filter(email='kwabena@example.com').exists())
        self.assertTrue(Student.objects.filter(pk=self.student.pk).exists())
