"""Exceptions raised by the domain configuration core."""
from typing import List

from cms_admin.apps.domains.domain.models import Violation


class DomainConfigError(Exception):
    """Base class for all domain configuration errors."""


class ConfigParseError(DomainConfigError):
    """Configuration text is not well-formed or misses required fields."""


class ConfigSourceError(DomainConfigError):
    """The filesystem config source could not be read or is corrupt."""


class PersistenceError(DomainConfigError):
    """The entity store failed to write or remove a domain."""


class DomainNotFound(DomainConfigError):
    """No domain with the requested identifier exists."""


class MembershipError(DomainConfigError):
    """A membership change was rejected."""


class ReconciliationStateError(DomainConfigError):
    """An action was requested in a state that does not accept it."""


class ValidationViolation(DomainConfigError):
    """A single domain rule violation."""

    def __init__(self, violation: Violation):
        super().__init__(str(violation))
        self.violation = violation


class DomainValidationError(DomainConfigError):
    """One or more domain rules were violated."""

    def __init__(self, violations: List[Violation]):
        super().__init__("; ".join(str(v) for v in violations))
        self.violations = violations

    def as_field_errors(self):
        errors = {}
        for violation in self.violations:
            errors.setdefault(violation.property_path, []).append(str(violation))
        return errors
