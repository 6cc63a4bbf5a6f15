import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from cms_admin.apps.domains.application.services import get_domain_service
from cms_admin.apps.domains.domain.exceptions import DomainConfigError, DomainNotFound

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create domains for filesystem configs that have no domain yet'

    def add_arguments(self, parser):
        parser.add_argument('organization', help='Organization identifier')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only list the configs that would be imported',
        )

    def handle(self, *args, **options):
        organization = options['organization']
        svc = get_domain_service()

        try:
            listing = svc.list_domains(organization)
        except DomainNotFound as e:
            raise CommandError(str(e))

        if listing.warnings:
            raise CommandError(listing.warnings[0])

        if not listing.missing_identifiers:
            self.stdout.write('No new configurations found.')
            return

        if options['dry_run']:
            for identifier in listing.missing_identifiers:
                self.stdout.write(identifier)
            return

        start_time = timezone.now()
        imported = 0

        for identifier in listing.missing_identifiers:
            try:
                svc.create_domain(organization, svc.draft_domain(organization, identifier))
                imported += 1
            except DomainConfigError as e:
                logger.error(f"Error importing domain '{identifier}': {e}")
                self.stderr.write(self.style.ERROR(f"Skipped {identifier}: {e}"))

        duration = timezone.now() - start_time
        self.stdout.write(self.style.SUCCESS(
            f"Imported {imported} of {len(listing.missing_identifiers)} domains in {duration.total_seconds():.2f} seconds"
        ))
