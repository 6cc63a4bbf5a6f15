"""Filesystem config source: one JSON file per domain."""
import logging
import re
from pathlib import Path
from typing import Set, Tuple

from cms_admin.apps.domains.domain.exceptions import ConfigSourceError

logger = logging.getLogger(__name__)

KEY_PART_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')
CONFIG_SUFFIX = '.json'


class FilesystemConfigSource:
    """Reads and writes domain configs at <base_dir>/<organization>/<identifier>.json."""

    def __init__(self, base_dir):
        self.base_dir = Path(base_dir)

    def _split_key(self, domain_key: str) -> Tuple[str, str]:
        organization, _, identifier = domain_key.partition('/')
        for part in (organization, identifier):
            if not KEY_PART_PATTERN.match(part):
                raise ConfigSourceError(f"Invalid domain key '{domain_key}'")
        return organization, identifier

    def path_for(self, domain_key: str) -> Path:
        organization, identifier = self._split_key(domain_key)
        return self.base_dir / organization / f"{identifier}{CONFIG_SUFFIX}"

    def exists(self, domain_key: str) -> bool:
        return self.path_for(domain_key).is_file()

    def read(self, domain_key: str) -> str:
        path = self.path_for(domain_key)
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise ConfigSourceError(f"No config file for domain '{domain_key}'")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading config file {path}: {e}")
            raise ConfigSourceError(f"Cannot load config file of domain '{domain_key}'") from e

    def write(self, domain_key: str, text: str) -> None:
        path = self.path_for(domain_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding='utf-8')
        except OSError as e:
            logger.error(f"Error writing config file {path}: {e}")
            raise ConfigSourceError(f"Cannot write config file of domain '{domain_key}'") from e

        logger.info(f"Wrote config file {path}")

    def delete(self, domain_key: str) -> None:
        path = self.path_for(domain_key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error(f"Error deleting config file {path}: {e}")
            raise ConfigSourceError(f"Cannot delete config file of domain '{domain_key}'") from e

        logger.info(f"Deleted config file {path}")

    def list_available(self, organization: str) -> Set[str]:
        if not KEY_PART_PATTERN.match(organization):
            raise ConfigSourceError(f"Invalid organization '{organization}'")

        directory = self.base_dir / organization
        if not directory.exists():
            return set()

        try:
            return {path.stem for path in directory.iterdir()
                    if path.is_file() and path.suffix == CONFIG_SUFFIX}
        except OSError as e:
            logger.error(f"Error listing config directory {directory}: {e}")
            raise ConfigSourceError(f"Cannot list configs of organization '{organization}'") from e


# Singleton instance
_config_source = None


def get_config_source() -> FilesystemConfigSource:
    """
    Get or create the config source singleton.

    Returns:
        FilesystemConfigSource rooted at settings.DOMAIN_CONFIG_DIR
    """
    global _config_source
    if _config_source is None:
        from django.conf import settings
        _config_source = FilesystemConfigSource(settings.DOMAIN_CONFIG_DIR)
    return _config_source


def reset_config_source() -> None:
    """Drop the singleton, e.g. after DOMAIN_CONFIG_DIR changed."""
    global _config_source
    _config_source = None
