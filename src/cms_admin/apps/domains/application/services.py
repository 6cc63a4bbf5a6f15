"""Application services for domain management."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from cms_admin.apps.domains.application.reconciliation import ReconciliationFlow, ReconciliationOutcome
from cms_admin.apps.domains.application.validation import GROUP_DELETE, DomainValidator
from cms_admin.apps.domains.domain.admin_views import admin_views_for
from cms_admin.apps.domains.domain.codec import ConfigCodec, ParseError
from cms_admin.apps.domains.domain.exceptions import (
    ConfigSourceError,
    DomainNotFound,
    DomainValidationError
)
from cms_admin.apps.domains.domain.interfaces import ConfigSourceInterface, ValidatorInterface
from cms_admin.apps.domains.domain.models import AdminView, DomainEntity, FlowAction, PendingEdit

logger = logging.getLogger(__name__)

BLANK_TITLE = 'Untitled Domain'
BLANK_IDENTIFIER = 'untitled'


@dataclass
class DomainListing:
    """Domains of an organization plus configs that only exist on the filesystem."""
    domains: List[DomainEntity]
    missing_identifiers: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class DomainApplicationService:
    """Application service for listing, creating, updating and deleting domains."""

    def __init__(
            self,
            store,
            config_source: ConfigSourceInterface,
            codec: Optional[ConfigCodec] = None,
            validator: Optional[ValidatorInterface] = None
    ):
        """
        Initialize the domain service.

        Args:
            store: Domain store, a DjangoDomainStore or compatible object
            config_source: Source of filesystem configs
            codec: Config codec
            validator: Domain rule validator, built from the store if omitted
        """
        self.store = store
        self.config_source = config_source
        self.codec = codec or ConfigCodec()
        self.validator = validator or DomainValidator(
            identifier_taken=store.identifier_taken,
            membership_count=store.membership_count
        )

    def list_domains(self, organization: str) -> DomainListing:
        """
        List the domains of an organization.

        Configs found on the filesystem that have no domain yet are returned as
        missing identifiers. If the filesystem cannot be read, a warning is
        returned instead.

        Raises:
            DomainNotFound: if the organization does not exist
        """
        self._check_organization(organization)
        domains = self.store.find_by_organization(organization)
        listing = DomainListing(domains=domains)

        try:
            available = self.config_source.list_available(organization)
            existing = {domain.identifier for domain in domains}
            listing.missing_identifiers = sorted(available - existing)
        except ConfigSourceError as e:
            logger.error(f"Error listing filesystem configs of '{organization}': {e}")
            listing.warnings.append('Could not load (potential new) configurations from the filesystem.')

        return listing

    def draft_domain(self, organization: str, import_identifier: Optional[str] = None) -> str:
        """
        Get the initial editor text for a new domain.

        Args:
            organization: The organization identifier
            import_identifier: Identifier of a filesystem config to import

        Returns:
            Config text

        Raises:
            DomainNotFound: if the organization does not exist
            ConfigSourceError: if the imported config cannot be loaded
        """
        self._check_organization(organization)

        if import_identifier is None:
            entity = DomainEntity(title=BLANK_TITLE, identifier=BLANK_IDENTIFIER, organization=organization)
            return self.codec.serialize(entity)

        key = DomainEntity(identifier=import_identifier, organization=organization).domain_key
        text = self.config_source.read(key)

        result = self.codec.parse(text)
        if isinstance(result, ParseError):
            logger.error(f"Error importing config '{key}': {result.message}")
            raise ConfigSourceError('Could not load configuration from the filesystem.')

        return text

    def create_domain(self, organization: str, config_text: str) -> DomainEntity:
        """
        Create a domain from config text.

        Raises:
            DomainNotFound: if the organization does not exist
            ConfigParseError: if the text cannot be parsed
            DomainValidationError: if the domain violates domain rules
            PersistenceError: if the store fails
        """
        self._check_organization(organization)

        entity = self.codec.load(config_text)
        entity.organization = organization
        entity.config = self.codec.serialize(entity)
        entity.mark_config_changed()

        violations = self.validator.validate(entity)
        if violations:
            raise DomainValidationError(violations)

        self.store.persist(entity)
        self.store.flush()
        return entity

    def _check_organization(self, organization: str) -> None:
        if not self.store.organization_exists(organization):
            raise DomainNotFound(f"Organization '{organization}' not found")

    def get_domain(self, organization: str, identifier: str) -> DomainEntity:
        """
        Get a domain.

        Raises:
            DomainNotFound: if the domain does not exist
        """
        entity = self.store.get(organization, identifier)
        if entity is None:
            raise DomainNotFound(f"Domain '{organization}/{identifier}' not found")
        return entity

    def reconciliation(self) -> ReconciliationFlow:
        return ReconciliationFlow(self.codec, self.validator, self.store, self.config_source)

    def start_update(self, organization: str, identifier: str) -> Tuple[ReconciliationFlow, ReconciliationOutcome]:
        """Seed an update of a domain."""
        flow = self.reconciliation()
        outcome = flow.start(self.get_domain(organization, identifier))
        return flow, outcome

    def apply_update(self, organization: str, identifier: str, config_text: str,
                     action: FlowAction = FlowAction.SUBMIT) -> ReconciliationOutcome:
        """Run one submit, confirm or back action against a domain."""
        flow, _ = self.start_update(organization, identifier)
        return flow.handle(PendingEdit(config_text, FlowAction(action)))

    def delete_domain(self, organization: str, identifier: str) -> None:
        """
        Delete a domain.

        Raises:
            DomainNotFound: if the domain does not exist
            DomainValidationError: if the domain still has members
        """
        entity = self.get_domain(organization, identifier)

        violations = self.validator.validate(entity, GROUP_DELETE)
        if violations:
            raise DomainValidationError(violations)

        self.store.remove(entity)
        self.store.flush()

    def admin_views(self, organization: str, identifier: str) -> List[AdminView]:
        return admin_views_for(self.get_domain(organization, identifier))


def get_domain_service() -> DomainApplicationService:
    """
    Create a domain service for one request.

    The store is a unit of work, so every request gets its own service.
    """
    from cms_admin.apps.domains.infrastructure.filesystem import get_config_source
    from cms_admin.apps.domains.infrastructure.repositories import DjangoDomainStore

    config_source = get_config_source()
    return DomainApplicationService(
        store=DjangoDomainStore(config_source),
        config_source=config_source
    )
