"""Domain rules."""
import re
from typing import Callable, List, Optional

from cms_admin.apps.domains.domain.models import DomainEntity, Violation

IDENTIFIER_PATTERN = re.compile(r'^[a-z0-9_]+$')
ROLE_PATTERN = re.compile(r'^ROLE_[A-Z0-9_]+$')

MAX_TITLE_LENGTH = 255
MAX_IDENTIFIER_LENGTH = 200

GROUP_DELETE = 'DELETE'


class DomainValidator:
    """Validates domain entities against the domain rules."""

    def __init__(
            self,
            identifier_taken: Optional[Callable[[str, str, Optional[int]], bool]] = None,
            membership_count: Optional[Callable[[DomainEntity], int]] = None
    ):
        """
        Initialize the validator.

        Args:
            identifier_taken: Callable (organization, identifier, exclude_id) telling
                whether another domain already uses the identifier
            membership_count: Callable returning the number of members and open
                invitations of a domain
        """
        self.identifier_taken = identifier_taken
        self.membership_count = membership_count

    def validate(self, entity: DomainEntity, group: Optional[str] = None) -> List[Violation]:
        if group == GROUP_DELETE:
            return self._validate_delete(entity)

        violations = []
        violations.extend(self._validate_title(entity))
        violations.extend(self._validate_identifier(entity))
        violations.extend(self._validate_roles(entity))

        for name in ('content_types', 'setting_types', 'domain_member_types'):
            violations.extend(self._validate_types(name, getattr(entity, name)))
        violations.extend(self._validate_admin_views(entity))

        for key, value in entity.permissions.items():
            if not isinstance(value, str):
                violations.append(Violation(f'permissions[{key}]', 'This value should be an expression string.'))

        return violations

    def _validate_title(self, entity: DomainEntity) -> List[Violation]:
        if not entity.title.strip():
            return [Violation('title', 'This value should not be blank.')]
        if len(entity.title) > MAX_TITLE_LENGTH:
            return [Violation('title', f'This value is too long. It should have {MAX_TITLE_LENGTH} characters or less.')]
        return []

    def _validate_identifier(self, entity: DomainEntity) -> List[Violation]:
        if not entity.identifier:
            return [Violation('identifier', 'This value should not be blank.')]
        if len(entity.identifier) > MAX_IDENTIFIER_LENGTH:
            return [Violation(
                'identifier',
                f'This value is too long. It should have {MAX_IDENTIFIER_LENGTH} characters or less.'
            )]
        if not IDENTIFIER_PATTERN.match(entity.identifier):
            return [Violation('identifier', 'This value contains invalid characters.')]

        if entity.organization is None:
            return [Violation('organization', 'This value should not be blank.')]

        if self.identifier_taken and self.identifier_taken(entity.organization, entity.identifier, entity.id):
            return [Violation('identifier', 'This identifier is already taken.')]
        return []

    def _validate_roles(self, entity: DomainEntity) -> List[Violation]:
        if not entity.roles:
            return [Violation('roles', 'This collection should contain 1 element or more.')]

        violations = []
        for index, role in enumerate(entity.roles):
            if not ROLE_PATTERN.match(role):
                violations.append(Violation(f'roles[{index}]', 'This value should start with ROLE_.'))
        return violations

    def _validate_types(self, name: str, items: List[dict]) -> List[Violation]:
        violations = []
        seen = set()

        for index, item in enumerate(items):
            path = f'{name}[{index}].identifier'
            identifier = item.get('identifier')

            if not identifier or not isinstance(identifier, str):
                violations.append(Violation(path, 'This value should not be blank.'))
            elif not IDENTIFIER_PATTERN.match(identifier):
                violations.append(Violation(path, 'This value contains invalid characters.'))
            elif identifier in seen:
                violations.append(Violation(path, 'This identifier is already taken.'))
            else:
                seen.add(identifier)

        return violations

    def _validate_admin_views(self, entity: DomainEntity) -> List[Violation]:
        violations = []

        for index, content_type in enumerate(entity.content_types):
            directives = content_type.get('admin_views')
            path = f'content_types[{index}].admin_views'
            if directives is None:
                continue
            if not isinstance(directives, list):
                violations.append(Violation(path, 'This value should be a list of objects.'))
                continue

            for position, directive in enumerate(directives):
                if not isinstance(directive, dict):
                    violations.append(Violation(f'{path}[{position}]', 'This value should be an object.'))
                    continue
                settings = directive.get('settings')
                if settings is None:
                    continue
                if not isinstance(settings, dict):
                    violations.append(Violation(f'{path}[{position}].settings', 'This value should be an object.'))
                elif settings.get('filter') is not None and not isinstance(settings['filter'], dict):
                    violations.append(Violation(f'{path}[{position}].settings.filter',
                                                'This value should be an object.'))

        return violations

    def _validate_delete(self, entity: DomainEntity) -> List[Violation]:
        if self.membership_count and self.membership_count(entity) > 0:
            return [Violation('members', 'This domain still has members or open invitations.')]
        return []
