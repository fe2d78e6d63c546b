from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from .models import ApiToken, Role

User = get_user_model()


class UserManagerTests(TestCase):
    """Tests for the custom UserManager (public schema)."""

    def test_create_user_without_email_raises_error(self):
        """Creating a user without email raises ValueError."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_user_normalizes_email(self):
        """Email domain is lowercased."""
        user = User.objects.create_user(email='test@EXAMPLE.COM', password='testpass123')
        self.assertEqual(user.email, 'test@example.com')
        self.assertEqual(str(user), 'test@example.com')

    def test_superuser_acts_as_admin(self):
        """Superusers resolve to the Admin role."""
        user = User.objects.create_superuser(email='owner@example.com', password='ownerpass123')
        self.assertEqual(user.role, Role.ADMIN)
        self.assertEqual(user.role_label, 'Super Admin')

    def test_plain_user_has_no_role(self):
        user = User.objects.create_user(email='user@example.com', password='userpass123')
        self.assertIsNone(user.role)
        self.assertEqual(user.role_label, 'User')


class TenantUserRoleTests(TenantTestCase):
    """Role helpers on the tenant schema."""

    def test_role_helpers_map_to_roles(self):
        """Each manager helper produces a user with the matching role."""
        cases = [
            (User.objects.create_school_admin, Role.ADMIN),
            (User.objects.create_teacher, Role.TEACHER),
            (User.objects.create_student, Role.STUDENT),
            (User.objects.create_parent, Role.PARENT),
        ]
        for index, (factory, role) in enumerate(cases):
            user = factory(email=f'user{index}@school.com', password='pass12345')
            self.assertEqual(user.role, role)

    def test_school_admin_is_not_django_staff(self):
        user = User.objects.create_school_admin(email='head@school.com', password='pass12345')
        self.assertFalse(user.is_staff)
        self.assertEqual(user.role_label, 'School Admin')


class ApiTokenTests(TenantTestCase):
    """Tests for the ApiToken model."""

    def setUp(self):
        self.user = User.objects.create_teacher(email='teacher@school.com', password='pass12345')

    def test_token_defaults(self):
        """New tokens get a random key and an expiry in the future."""
        token = ApiToken.objects.create(user=self.user)
        self.assertEqual(len(token.key), 40)
        self.assertFalse(token.is_expired)
        self.assertFalse(token.revoked)

    def test_active_excludes_revoked_and_expired(self):
        live = ApiToken.objects.create(user=self.user)
        revoked = ApiToken.objects.create(user=self.user)
        revoked.revoke()
        ApiToken.objects.create(user=self.user, expires_at=timezone.now() - timedelta(minutes=1))

        self.assertEqual(list(ApiToken.objects.active()), [live])

    def test_active_excludes_inactive_users(self):
        ApiToken.objects.create(user=self.user)
        self.user.is_active = False
        self.user.save()
        self.assertFalse(ApiToken.objects.active().exists())


class AuthEndpointTests(TenantTestCase):
    """Tests for login, logout and me."""

    def setUp(self):
        cache.clear()
        self.client = TenantClient(self.tenant)
        self.user = User.objects.create_teacher(
            email='teacher@school.com',
            password='pass12345',
            first_name='Ama',
            last_name='Owusu',
        )

    def login(self, email='teacher@school.com', password='pass12345'):
        return self.client.post(
            '/api/auth/login/',
            {'email': email, 'password': password},
            content_type='application/json',
        )

    def test_login_returns_token(self):
        """Valid credentials return a bearer token and the caller's role."""
        response = self.login()
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(ApiToken.objects.filter(key=body['token'], user=self.user).exists())
        self.assertEqual(body['user']['role'], 'Teacher')
        self.assertEqual(body['user']['name'], 'Ama Owusu')

    def test_login_wrong_password(self):
        response = self.login(password='wrong')
        self.assertEqual(response.status_code, 401)
        self.assertIn('error', response.json())

    def test_login_missing_fields(self):
        """Missing credentials are a validation failure."""
        response = self.client.post('/api/auth/login/', {}, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['details'])

    def test_login_invalid_json(self):
        response = self.client.post('/api/auth/login/', 'not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid JSON')

    def test_login_rejects_user_without_role(self):
        User.objects.create_user(email='nobody@school.com', password='pass12345')
        response = self.login(email='nobody@school.com')
        self.assertEqual(response.status_code, 401)

    def test_login_requires_post(self):
        response = self.client.get('/api/auth/login/')
        self.assertEqual(response.status_code, 405)

    def test_me_requires_token(self):
        """Requests without a bearer token are rejected."""
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Unauthorized'})

    def test_me_rejects_unknown_token(self):
        response = self.client.get('/api/auth/me/', HTTP_AUTHORIZATION='Bearer nope')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Invalid token'})

    def test_me_rejects_expired_token(self):
        token = ApiToken.objects.create(user=self.user, expires_at=timezone.now() - timedelta(seconds=1))
        response = self.client.get('/api/auth/me/', HTTP_AUTHORIZATION=f'Bearer {token.key}')
        self.assertEqual(response.status_code, 401)

    def test_me_returns_caller(self):
        token = ApiToken.objects.create(user=self.user)
        response = self.client.get('/api/auth/me/', HTTP_AUTHORIZATION=f'Bearer {token.key}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['email'], 'teacher@school.com')
        token.refresh_from_db()
        self.assertIsNotNone(token.last_used_at)

    def test_logout_revokes_token(self):
        """A token cannot be used after logout."""
        token = ApiToken.objects.create(user=self.user)
        header = {'HTTP_AUTHORIZATION': f'Bearer {token.key}'}

        response = self.client.post('/api/auth/logout/', **header)
        self.assertEqual(response.status_code, 200)

        response = self.client.get('/api/auth/me/', **header)
        self.assertEqual(response.status_code, 401)

    def test_login_is_rate_limited(self):
        """Repeated attempts from one address get a 429."""
        statuses = [self.login(password='wrong').status_code for _ in range(25)]
        self.assertIn(429, statuses)
