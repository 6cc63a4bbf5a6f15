"""Domain interfaces for domain configuration management."""
from typing import Any, Dict, List, Optional, Protocol, Set

from cms_admin.apps.domains.domain.models import DomainEntity, Violation


class ConfigSourceInterface(Protocol):
    """Interface for the filesystem config source."""

    def exists(self, domain_key: str) -> bool:
        """
        Check whether a config file exists for a domain.

        Args:
            domain_key: "<organization>/<identifier>"

        Returns:
            True if a config file exists
        """
        ...

    def read(self, domain_key: str) -> str:
        """
        Read the raw config text of a domain.

        Args:
            domain_key: "<organization>/<identifier>"

        Returns:
            The raw config text

        Raises:
            ConfigSourceError: if the file is missing or unreadable
        """
        ...

    def write(self, domain_key: str, text: str) -> None:
        """
        Write the config text of a domain.

        Args:
            domain_key: "<organization>/<identifier>"
            text: The config text to write
        """
        ...

    def delete(self, domain_key: str) -> None:
        """
        Delete the config file of a domain. A missing file is not an error.

        Args:
            domain_key: "<organization>/<identifier>"
        """
        ...

    def list_available(self, organization: str) -> Set[str]:
        """
        List domain identifiers that have a config file.

        Args:
            organization: The organization identifier

        Returns:
            Set of domain identifiers
        """
        ...


class DomainStoreInterface(Protocol):
    """Interface for the domain entity store."""

    def persist(self, entity: DomainEntity) -> None:
        """Schedule an entity to be written on the next flush."""
        ...

    def remove(self, entity: DomainEntity) -> None:
        """Schedule an entity to be removed on the next flush."""
        ...

    def flush(self) -> None:
        """
        Write all scheduled changes.

        Raises:
            PersistenceError: if the store fails
        """
        ...


class ValidatorInterface(Protocol):
    """Interface for domain rule validation."""

    def validate(self, entity: DomainEntity, group: Optional[str] = None) -> List[Violation]:
        """
        Validate an entity.

        Args:
            entity: The entity to validate
            group: Optional validation group, e.g. "DELETE"

        Returns:
            List of violations, empty if the entity is valid
        """
        ...


class NotifierInterface(Protocol):
    """Interface for sending notifications."""

    def send(self, recipient: str, template_ref: str, template_data: Dict[str, Any]) -> None:
        """
        Send a templated message to a recipient.

        Args:
            recipient: Email address of the recipient
            template_ref: Template used to render the body
            template_data: Context for the template
        """
        ...
