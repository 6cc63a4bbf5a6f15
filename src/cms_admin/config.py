# src/cms_admin/config.py
import os
from dataclasses import dataclass, field
from typing import List


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('true', 'yes', '1', 't', 'y')


@dataclass
class MailerConfig:
    """Configuration for outgoing email."""
    sender: str
    invitation_url: str

    @classmethod
    def from_env(cls) -> 'MailerConfig':
        """Create from environment variables."""
        return cls(
            sender=os.environ.get("CMS_ADMIN_MAILER_SENDER", "noreply@localhost"),
            invitation_url=os.environ.get(
                "CMS_ADMIN_INVITATION_URL",
                "http://localhost:8000/profile/accept-invitation?token={token}"
            ),
        )


@dataclass
class AppConfig:
    """Main application configuration."""
    db_path: str
    config_dir: str
    mailer: MailerConfig
    secret_key: str = "insecure-development-key"
    debug: bool = False
    log_level: str = "INFO"
    allowed_hosts: List[str] = field(default_factory=lambda: ["localhost", "127.0.0.1"])


def load_config() -> AppConfig:
    """Load application configuration from environment."""
    config = AppConfig(
        db_path=os.environ.get("CMS_ADMIN_DB_PATH", "db.sqlite3"),
        config_dir=os.environ.get("CMS_ADMIN_CONFIG_DIR", "config/domains"),
        mailer=MailerConfig.from_env(),
        secret_key=os.environ.get("CMS_ADMIN_SECRET_KEY", "insecure-development-key"),
        debug=_env_bool("CMS_ADMIN_DEBUG", False),
        log_level=os.environ.get("CMS_ADMIN_LOG_LEVEL", "INFO").upper(),
    )

    hosts = os.environ.get("CMS_ADMIN_ALLOWED_HOSTS")
    if hosts:
        config.allowed_hosts = [host.strip() for host in hosts.split(',') if host.strip()]

    return config
