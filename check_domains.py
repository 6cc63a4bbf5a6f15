import os
import sys
import django

# Set up Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cms_admin.settings')
sys.path.insert(0, os.path.abspath('src'))
django.setup()

# Now we can import our services
from cms_admin.apps.domains.application.services import get_domain_service
from cms_admin.apps.domains.domain.exceptions import DomainConfigError
from cms_admin.apps.domains.infrastructure.orm import Organization

svc = get_domain_service()

for organization in Organization.objects.all():
    print(f"===== {organization.identifier} =====")
    listing = svc.list_domains(organization.identifier)

    for domain in listing.domains:
        try:
            _, outcome = svc.start_update(organization.identifier, domain.identifier)
            status = outcome.drift.status
        except DomainConfigError as e:
            status = f"error: {e}"
        print(f"{domain.identifier}: {domain.title} [{status}]")

    for identifier in listing.missing_identifiers:
        print(f"{identifier}: only on filesystem")

    for warning in listing.warnings:
        print(f"WARNING: {warning}")
    print("-" * 40)
