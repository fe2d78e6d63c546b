from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from schools.models import School, validate_schema_name


class SchemaNameTests(SimpleTestCase):
    """Tests for tenant schema name validation."""

    def test_lowercases_valid_name(self):
        self.assertEqual(validate_schema_name('Accra_Academy2'), 'accra_academy2')

    def test_rejects_hyphens_and_spaces(self):
        for name in ('accra-academy', 'accra academy', ''):
            with self.subTest(name=name):
                with self.assertRaises(ValidationError):
                    validate_schema_name(name)

    def test_rejects_reserved_names(self):
        with self.assertRaises(ValidationError):
            validate_schema_name('Public')


class SchoolDisplayNameTests(SimpleTestCase):

    def test_short_name_preferred(self):
        school = School(name='Accra Academy', short_name='ACCRA')
        self.assertEqual(school.display_name, 'ACCRA')

    def test_falls_back_to_name(self):
        self.assertEqual(School(name='Accra Academy').display_name, 'Accra Academy')
