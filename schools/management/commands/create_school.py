import os
import getpass

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django_tenants.utils import get_public_schema_name, schema_context

from schools.models import School, Domain, validate_schema_name


class Command(BaseCommand):
    help = 'Create a school tenant, its domain and a school admin'

    def add_arguments(self, parser):
        parser.add_argument('--name', help='School name (e.g., "Demo School")')
        parser.add_argument('--subdomain', help='Subdomain/schema for the school (e.g., "demo")')
        parser.add_argument('--admin-email', help='School admin email address')
        parser.add_argument('--admin-password', help='School admin password')
        parser.add_argument(
            '--seed-defaults',
            action='store_true',
            help='Seed the default grading scale and comment bands'
        )
        parser.add_argument('--no-input', action='store_true', help='Run without prompts')

    def handle(self, *args, **options):
        name = options.get('name')
        subdomain = options.get('subdomain')
        admin_email = options.get('admin_email')
        admin_password = options.get('admin_password')

        if not options.get('no_input'):
            if not name:
                name = input('  School name: ').strip()
            if not subdomain:
                suggested = name.lower().replace(' ', '_')[:20] if name else 'school'
                subdomain = input(f'  Subdomain [{suggested}]: ').strip() or suggested
            if not admin_email:
                admin_email = input('  Admin email: ').strip()
            if not admin_password:
                admin_password = self._prompt_password()

        if not all([name, subdomain, admin_email, admin_password]):
            raise CommandError('All of --name, --subdomain, --admin-email and --admin-password are required')

        try:
            schema_name = validate_schema_name(subdomain.replace('-', '_').replace(' ', '_'))
        except ValidationError as e:
            raise CommandError('; '.join(e.messages))

        base_domain = os.getenv('BASE_DOMAIN', 'localhost')
        full_domain = f'{schema_name}.{base_domain}'

        self._ensure_public_tenant(base_domain)

        school = School.objects.filter(schema_name=schema_name).first()
        if school:
            self.stdout.write(self.style.WARNING(f'School with schema "{schema_name}" already exists'))
        else:
            school = School.objects.create(
                schema_name=schema_name,
                name=name,
                short_name=schema_name.upper()[:20],
            )
            self.stdout.write(self.style.SUCCESS(f'School created: {school.name}'))

        if not Domain.objects.filter(domain=full_domain).exists():
            Domain.objects.create(domain=full_domain, tenant=school, is_primary=True)
            self.stdout.write(self.style.SUCCESS(f'Domain created: {full_domain}'))

        User = get_user_model()
        with schema_context(school.schema_name):
            if User.objects.filter(email=admin_email).exists():
                self.stdout.write(f'School admin already exists: {admin_email}')
            else:
                User.objects.create_school_admin(
                    email=admin_email,
                    password=admin_password,
                    first_name='School',
                    last_name='Admin',
                )
                self.stdout.write(self.style.SUCCESS(f'School admin created: {admin_email}'))

        if options.get('seed_defaults'):
            call_command('seed_report_defaults', schema=school.schema_name, stdout=self.stdout)

        self.stdout.write(self.style.SUCCESS(f'Done. API base: http://{full_domain}/api/'))

    def _prompt_password(self):
        while True:
            password = getpass.getpass('  Admin password: ')
            if password != getpass.getpass('  Confirm password: '):
                self.stdout.write(self.style.ERROR('  Passwords do not match. Try again.'))
                continue
            try:
                validate_password(password)
                return password
            except ValidationError as e:
                self.stdout.write(self.style.ERROR(f'  {"; ".join(e.messages)}'))

    def _ensure_public_tenant(self, base_domain):
        """django-tenants needs a tenant row for the public schema."""
        public_schema = get_public_schema_name()
        public = School.objects.filter(schema_name=public_schema).first()
        if public is None:
            public = School.objects.create(schema_name=public_schema, name='Public')
            self.stdout.write(self.style.SUCCESS('Public tenant created'))
        if not Domain.objects.filter(tenant=public).exists():
            Domain.objects.create(domain=base_domain, tenant=public, is_primary=True)
