"""Domain models for domain configuration management."""
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


DEFAULT_ROLES = ['ROLE_ADMINISTRATOR', 'ROLE_EDITOR']


class DomainEntity:
    """In-memory representation of a domain and its parsed configuration."""

    # Fields that make up the configuration of a domain, in canonical order.
    CONFIG_FIELDS = [
        'title', 'identifier', 'roles', 'content_types',
        'setting_types', 'domain_member_types', 'permissions'
    ]

    def __init__(
            self,
            title: str = "",
            identifier: str = "",
            organization: Optional[str] = None,
            roles: Optional[List[str]] = None,
            content_types: Optional[List[Dict[str, Any]]] = None,
            setting_types: Optional[List[Dict[str, Any]]] = None,
            domain_member_types: Optional[List[Dict[str, Any]]] = None,
            permissions: Optional[Dict[str, Any]] = None,
            config: str = "",
            config_variables: Optional[Dict[str, Any]] = None,
            id: Optional[int] = None
    ):
        self.id = id
        self.title = title
        self.identifier = identifier
        self.organization = organization
        self.roles = list(DEFAULT_ROLES) if roles is None else roles
        self.content_types = content_types or []
        self.setting_types = setting_types or []
        self.domain_member_types = domain_member_types or []
        self.permissions = permissions or {}
        self.config = config
        self.config_variables = config_variables or {}
        self.config_changed = False

    @property
    def domain_key(self) -> str:
        """Key under which the config source stores this domain."""
        return f"{self.organization}/{self.identifier}"

    def mark_config_changed(self) -> None:
        """Force the config to be written on the next flush."""
        self.config_changed = True

    def set_from_entity(self, other: 'DomainEntity') -> 'DomainEntity':
        """Copy all configuration fields from another entity."""
        for name in self.CONFIG_FIELDS:
            setattr(self, name, copy.deepcopy(getattr(other, name)))

        if other.config != self.config:
            self.config = other.config
            self.config_changed = True

        return self

    def snapshot(self) -> 'DomainEntity':
        """Return a detached deep copy, used to roll back failed edits."""
        return copy.deepcopy(self)

    def restore(self, snapshot: 'DomainEntity') -> 'DomainEntity':
        """Reset every attribute, including the changed flag, to a snapshot."""
        self.__dict__.update(copy.deepcopy(snapshot.__dict__))
        return self

    def __eq__(self, other) -> bool:
        if not isinstance(other, DomainEntity):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name)
                   for name in self.CONFIG_FIELDS + ['organization', 'config'])

    def __repr__(self) -> str:
        return f"DomainEntity({self.domain_key!r})"


@dataclass
class Violation:
    """A single failed domain rule."""
    property_path: str
    message: str

    def __str__(self) -> str:
        return f"{self.property_path}: {self.message}"


@dataclass
class DriftResult:
    """Outcome of comparing a persisted domain with its filesystem config."""

    NO_DRIFT = 'no_drift'
    DRIFT = 'drift'
    MISSING_ON_FILESYSTEM = 'missing_on_filesystem'

    status: str
    filesystem_config: Optional[str] = None

    @classmethod
    def no_drift(cls) -> 'DriftResult':
        return cls(cls.NO_DRIFT)

    @classmethod
    def drift(cls, filesystem_config: str) -> 'DriftResult':
        return cls(cls.DRIFT, filesystem_config)

    @classmethod
    def missing(cls) -> 'DriftResult':
        return cls(cls.MISSING_ON_FILESYSTEM)

    @property
    def has_drift(self) -> bool:
        return self.status == self.DRIFT

    @property
    def is_missing(self) -> bool:
        return self.status == self.MISSING_ON_FILESYSTEM


class FlowAction(str, Enum):
    """User actions accepted by the reconciliation flow."""

    SUBMIT = "submit"  # Validate and preview
    CONFIRM = "confirm"  # Validate and commit
    BACK = "back"  # Abort the preview

    def __str__(self) -> str:
        return self.value


class FlowState(str, Enum):
    """States of the reconciliation flow."""

    SEEDING = "seeding"
    EDITING = "editing"
    VALIDATING = "validating"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMMITTED = "committed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class PendingEdit:
    """Raw configuration text submitted by the user for one update attempt."""
    config_text: str
    action: FlowAction = FlowAction.SUBMIT


@dataclass
class AdminView:
    """Configuration of an admin listing for a content type."""
    type: str
    return_type: str
    category: str
    content_type: Optional[str] = None
    config: Dict[str, Any] = field(default_factory=dict)
