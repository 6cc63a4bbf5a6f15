"""Drift detection between persisted domains and their filesystem configs."""
import logging
from typing import Optional

from cms_admin.apps.domains.domain.codec import ConfigCodec, ParseError
from cms_admin.apps.domains.domain.exceptions import ConfigSourceError
from cms_admin.apps.domains.domain.models import DomainEntity, DriftResult

logger = logging.getLogger(__name__)


class DriftDetector:
    """Compares a persisted entity against the filesystem config of the same domain."""

    def __init__(self, codec: ConfigCodec):
        self.codec = codec

    def detect(self, entity: DomainEntity, filesystem_text: Optional[str]) -> DriftResult:
        """
        Detect drift between an entity and raw filesystem config text.

        Both sides are compared in canonical form, so formatting and key
        order differences are not reported as drift.

        Args:
            entity: The persisted entity
            filesystem_text: Raw config text from the filesystem, or None

        Returns:
            DriftResult

        Raises:
            ConfigSourceError: if the filesystem text cannot be parsed
        """
        if filesystem_text is None:
            return DriftResult.missing()

        result = self.codec.parse(filesystem_text)
        if isinstance(result, ParseError):
            raise ConfigSourceError(
                f"Filesystem config of domain '{entity.domain_key}' is invalid: {result.message}"
            )

        persisted = self.codec.serialize(entity)
        filesystem = self.codec.serialize(result.entity)

        if persisted == filesystem:
            return DriftResult.no_drift()

        logger.info(f"Domain '{entity.domain_key}' differs from its filesystem config")
        return DriftResult.drift(filesystem)
