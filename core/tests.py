from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from accounts.models import ApiToken
from core.models import AcademicYear, Term

User = get_user_model()


class AcademicYearModelTests(TenantTestCase):
    """Tests for the AcademicYear model."""

    def _create_year(self, **kwargs):
        defaults = {
            'name': '2024/2025 Academic Year',
            'start_date': date(2024, 9, 1),
            'end_date': date(2025, 7, 31),
        }
        defaults.update(kwargs)
        return AcademicYear.objects.create(**defaults)

    def test_only_one_current_year(self):
        """Marking a year current clears the flag on the others."""
        first = self._create_year(is_current=True)
        second = self._create_year(name='2025/2026', start_date=date(2025, 9, 1),
                                   end_date=date(2026, 7, 31), is_current=True)
        first.refresh_from_db()
        self.assertFalse(first.is_current)
        self.assertEqual(AcademicYear.get_current(), second)


class TermModelTests(TenantTestCase):
    """Tests for the Term model."""

    def setUp(self):
        self.year = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )

    def test_year_is_academic_start_year(self):
        term = Term.objects.create(
            academic_year=self.year, name='First Term', term_number=1,
            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13),
        )
        self.assertEqual(term.year, 2024)

    def test_only_one_current_term(self):
        first = Term.objects.create(
            academic_year=self.year, name='First Term', term_number=1,
            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13), is_current=True,
        )
        second = Term.objects.create(
            academic_year=self.year, name='Second Term', term_number=2,
            start_date=date(2025, 1, 7), end_date=date(2025, 4, 4), is_current=True,
        )
        first.refresh_from_db()
        self.assertFalse(first.is_current)
        self.assertEqual(Term.get_current(), second)

    def test_clean_rejects_inverted_dates(self):
        term = Term(
            academic_year=self.year, name='First Term', term_number=1,
            start_date=date(2024, 12, 13), end_date=date(2024, 9, 9),
        )
        with self.assertRaises(ValidationError):
            term.clean()

    def test_to_dict_includes_next_term(self):
        term = Term.objects.create(
            academic_year=self.year, name='First Term', term_number=1,
            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13),
            next_term_starts=date(2025, 1, 7), next_term_ends=date(2025, 4, 4),
        )
        data = term.to_dict()
        self.assertEqual(data['nextTermStarts'], '2025-01-07')
        self.assertEqual(data['nextTermEnds'], '2025-04-04')
        self.assertEqual(data['year'], 2024)


class TermApiTests(TenantTestCase):
    """Tests for the term endpoints."""

    def setUp(self):
        self.client = TenantClient(self.tenant)
        self.year = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31),
            is_current=True,
        )
        self.admin = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.teacher = User.objects.create_teacher(email='teacher@school.com', password='pass12345')
        self.admin_auth = {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=self.admin).key}'}
        self.teacher_auth = {'HTTP_AUTHORIZATION': f'Bearer {ApiToken.objects.create(user=self.teacher).key}'}
        self.payload = {
            'name': 'First Term',
            'termNumber': 1,
            'startDate': '2024-09-09',
            'endDate': '2024-12-13',
            'nextTermStarts': '2025-01-07',
        }

    def test_admin_creates_term_in_current_year(self):
        """Without academicYearId the current academic year is used."""
        response = self.client.post('/api/terms/', self.payload, content_type='application/json',
                                    **self.admin_auth)
        self.assertEqual(response.status_code, 201)
        term = Term.objects.get()
        self.assertEqual(term.academic_year, self.year)
        self.assertEqual(term.next_term_starts, date(2025, 1, 7))

    def test_teacher_cannot_create_term(self):
        response = self.client.post('/api/terms/', self.payload, content_type='application/json',
                                    **self.teacher_auth)
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Term.objects.exists())

    def test_create_rejects_inverted_dates(self):
        self.payload['endDate'] = '2024-09-01'
        response = self.client.post('/api/terms/', self.payload, content_type='application/json',
                                    **self.admin_auth)
        self.assertEqual(response.status_code, 400)
        self.assertIn('end_date', response.json()['details'])

    def test_any_role_lists_terms(self):
        Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                            start_date=date(2024, 9, 9), end_date=date(2024, 12, 13))
        response = self.client.get('/api/terms/', **self.teacher_auth)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['terms']), 1)

    def test_partial_update_keeps_other_fields(self):
        """PUT only changes the fields present in the body."""
        term = Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                                   start_date=date(2024, 9, 9), end_date=date(2024, 12, 13))
        response = self.client.put(f'/api/terms/{term.pk}/', {'name': 'Term One'},
                                   content_type='application/json', **self.admin_auth)
        self.assertEqual(response.status_code, 200)
        term.refresh_from_db()
        self.assertEqual(term.name, 'Term One')
        self.assertEqual(term.start_date, date(2024, 9, 9))

    def test_delete_term(self):
        term = Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                                   start_date=date(2024, 9, 9), end_date=date(2024, 12, 13))
        response = self.client.delete(f'/api/terms/{term.pk}/', **self.admin_auth)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Term.objects.exists())

    def test_unknown_term_is_404(self):
        response = self.client.get('/api/terms/999/', **self.admin_auth)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Term not found'})

    def test_create_academic_year(self):
        response = self.client.post('/api/academic-years/', {
            'name': '2025/2026', 'startDate': '2025-09-01', 'endDate': '2026-07-31',
        }, content_type='application/json', **self.admin_auth)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(AcademicYear.objects.count(), 2)


class TenantMiddlewareTests(TenantTestCase):
    """Unknown hosts get a JSON 404 rather than the public site."""

    def test_unknown_host(self):
        client = TenantClient(self.tenant)
        response = client.get('/api/terms/', HTTP_HOST='nowhere.example.org')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'School not found'})
