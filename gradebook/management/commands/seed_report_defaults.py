"""
Management command to seed a default grading scale and report card comments.
Uses the WAEC A1-F9 scale used in Ghana for Basic and SHS schools.

Usage:
    # Run for a specific tenant
    python manage.py seed_report_defaults --schema=demo

    # Or run inside the current tenant context
    python manage.py tenant_command seed_report_defaults --schema=demo
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django_tenants.utils import schema_context

from gradebook.models import GradeScale, CommentBand


GRADE_SCALE = [
    ('A1', 80, 100, 'Excellent'),
    ('B2', 70, Decimal('79.99'), 'Very Good'),
    ('B3', 65, Decimal('69.99'), 'Good'),
    ('C4', 60, Decimal('64.99'), 'Credit'),
    ('C5', 55, Decimal('59.99'), 'Credit'),
    ('C6', 50, Decimal('54.99'), 'Credit'),
    ('D7', 45, Decimal('49.99'), 'Pass'),
    ('E8', 40, Decimal('44.99'), 'Pass'),
    ('F9', 0, Decimal('39.99'), 'Fail'),
]

CLASS_TEACHER_COMMENTS = [
    (80, 100, 'An outstanding performance! Keep up the excellent work.'),
    (60, Decimal('79.99'), 'A commendable performance. Keep working hard!'),
    (50, Decimal('59.99'), 'A fair performance. More effort and focus is needed to improve.'),
    (0, Decimal('49.99'), 'Needs serious improvement. Extra support and regular revision are recommended.'),
]

HEAD_TEACHER_COMMENTS = [
    (80, 100, 'Excellent results. A role model for others.'),
    (60, Decimal('79.99'), 'Good work. Aim higher next term.'),
    (50, Decimal('59.99'), 'Can do better with more concentration.'),
    (0, Decimal('49.99'), 'Below expectation. Parents are encouraged to see the class teacher.'),
]


class Command(BaseCommand):
    help = 'Seed the default WAEC grading scale and class/head teacher comment bands'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Replace existing grading and comment bands',
        )
        parser.add_argument(
            '--schema',
            type=str,
            help='Tenant schema name to run this command for',
        )

    def handle(self, *args, **options):
        force = options['force']
        schema = options.get('schema')

        if schema:
            with schema_context(schema):
                self._seed_data(force)
        else:
            self._seed_data(force)

    def _seed_data(self, force):
        with transaction.atomic():
            self.create_grade_scale(force)
            self.create_comment_bands(CommentBand.Kind.CLASS_TEACHER, CLASS_TEACHER_COMMENTS, force)
            self.create_comment_bands(CommentBand.Kind.HEAD_TEACHER, HEAD_TEACHER_COMMENTS, force)

        self.stdout.write(self.style.SUCCESS('Successfully seeded report card defaults'))

    def create_grade_scale(self, force):
        if GradeScale.objects.exists() and not force:
            self.stdout.write('Grading scale already exists. Use --force to overwrite.')
            return

        GradeScale.objects.all().delete()
        for label, low, high, interpretation in GRADE_SCALE:
            GradeScale.objects.create(
                grade_label=label,
                min_percentage=low,
                max_percentage=high,
                interpretation=interpretation,
            )
        self.stdout.write(f'  Created grading scale with {len(GRADE_SCALE)} grades')

    def create_comment_bands(self, kind, bands, force):
        existing = CommentBand.objects.filter(kind=kind)
        if existing.exists() and not force:
            self.stdout.write(f'{CommentBand.Kind(kind).label} comments already exist. Use --force to overwrite.')
            return

        existing.delete()
        for low, high, comment in bands:
            CommentBand.objects.create(kind=kind, min_percentage=low, max_percentage=high, comment=comment)
        self.stdout.write(f'  Created {len(bands)} {CommentBand.Kind(kind).label.lower()} comments')
