import logging

from django.conf import settings
from django.db import connection
from django.http import JsonResponse
from django_tenants.middleware.main import TenantMainMiddleware
from django_tenants.utils import get_public_schema_name, get_tenant_domain_model

logger = logging.getLogger(__name__)


class TenantNotFoundMiddleware(TenantMainMiddleware):
    """
    Tenant middleware that answers with a JSON 404 when the hostname does not
    belong to a school, instead of silently serving the public schema.

    Only the paths in PUBLIC_PATHS (health checks, the platform admin, static
    files) are allowed to fall back to the public schema.
    """

    @property
    def public_paths(self):
        return getattr(settings, 'PUBLIC_PATHS', ['/health/', '/health', '/static/', '/admin/'])

    def use_public_schema(self, request):
        from schools.models import School
        request.tenant = School.objects.filter(schema_name=get_public_schema_name()).first()
        if request.tenant is None:
            return False
        connection.set_tenant(request.tenant)
        self.setup_url_routing(request, force_public=True)
        return True

    def no_tenant_found(self, request, hostname):
        """
        Called when the hostname resolves to no school.
        Returns a response, or None once the public schema has been activated.
        """
        if any(request.path.startswith(path) for path in self.public_paths):
            if self.use_public_schema(request):
                return None

        logger.info(f"No school for host {hostname} ({request.path})")
        return JsonResponse({'error': 'School not found'}, status=404)

    def process_request(self, request):
        connection.set_schema_to_public()
        hostname = self.hostname_from_request(request)
        domain_model = get_tenant_domain_model()

        try:
            tenant = self.get_tenant(domain_model, hostname)
        except domain_model.DoesNotExist:
            return self.no_tenant_found(request, hostname)

        # The public tenant's own domain only serves the platform paths
        if tenant.schema_name == get_public_schema_name():
            return self.no_tenant_found(request, hostname)

        tenant.domain_url = hostname
        request.tenant = tenant
        connection.set_tenant(tenant)
        self.setup_url_routing(request)
