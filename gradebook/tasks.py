"""
Celery tasks for gradebook app.
Builds class broadsheets in the background for large classes.
"""
import logging

from celery import shared_task
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django_tenants.utils import schema_context

from . import config

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=config.TASK_MAX_RETRIES,
    default_retry_delay=config.TASK_RETRY_DELAY,
)
def export_class_broadsheet(self, class_id, term_id, report_type, tenant_schema):
    """
    Build the broadsheet for a class and store it with the default storage.

    Args:
        class_id: ID of the Class
        term_id: ID of the Term
        report_type: 'mid-end' or 'bot-mid'
        tenant_schema: Schema name for tenant context

    Returns:
        dict with success and the stored path (or error)
    """
    with schema_context(tenant_schema):
        from academics.models import Class
        from core.models import Term
        from .utils import render_broadsheet

        try:
            class_obj = Class.objects.get(pk=class_id)
            term = Term.objects.select_related('academic_year').get(pk=term_id)
        except (Class.DoesNotExist, Term.DoesNotExist):
            logger.error(f"Broadsheet export: class {class_id} or term {term_id} not found in {tenant_schema}")
            return {'success': False, 'error': 'Class or term not found'}

        filename, content = render_broadsheet(class_obj, term, report_type)

        try:
            path = default_storage.save(
                f"{config.EXPORT_DIRECTORY}/{tenant_schema}/{filename}",
                ContentFile(content),
            )
        except OSError as exc:
            logger.warning(f"Storing broadsheet {filename} failed, retrying: {exc}")
            raise self.retry(exc=exc)

        logger.info(f"Broadsheet for {class_obj} stored at {path}")
        return {'success': True, 'path': path}
