"""Canonical JSON codec for domain configurations."""
import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from cms_admin.apps.domains.domain.exceptions import ConfigParseError
from cms_admin.apps.domains.domain.models import DomainEntity

LIST_FIELDS = ['content_types', 'setting_types', 'domain_member_types']


@dataclass
class Parsed:
    """Successful parse."""
    entity: DomainEntity


@dataclass
class ParseError:
    """Failed parse."""
    message: str

    def to_exception(self) -> ConfigParseError:
        return ConfigParseError(self.message)


ParseResult = Union[Parsed, ParseError]


def canonical_value(value: Any) -> Any:
    """Sort nested mapping keys so equal configs serialize identically."""
    if isinstance(value, dict):
        return {key: canonical_value(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [canonical_value(item) for item in value]
    return value


def _resolve_variables(value: Any, variables: Dict[str, Any]) -> Any:
    """Replace every string equal to a variable name with the variable's value."""
    if isinstance(value, dict):
        return {key: _resolve_variables(item, variables) for key, item in value.items()}
    if isinstance(value, list):
        return [_resolve_variables(item, variables) for item in value]
    if isinstance(value, str) and value in variables:
        return variables[value]
    return value


def dump_json(data: Any) -> str:
    """Dump JSON the way all domain configs are written."""
    return json.dumps(data, indent=4, ensure_ascii=False)


class ConfigCodec:
    """Serializes domain entities to canonical JSON text and parses them back."""

    def serialize(self, entity: DomainEntity) -> str:
        """
        Serialize an entity to canonical config text.

        Top-level keys always appear in the order of DomainEntity.CONFIG_FIELDS,
        nested mappings are key-sorted.

        Args:
            entity: The entity to serialize

        Returns:
            Canonical JSON text
        """
        data = {}
        for name in DomainEntity.CONFIG_FIELDS:
            data[name] = canonical_value(getattr(entity, name))
        return dump_json(data)

    def parse(self, text: str) -> ParseResult:
        """
        Parse config text into a new entity.

        Args:
            text: Raw config text

        Returns:
            Parsed with the entity, or ParseError with a message
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            return ParseError(f"Config is not valid JSON: {e}")

        if not isinstance(data, dict):
            return ParseError("Config must be a JSON object")

        variables = data.pop('variables', None)
        if variables is not None:
            if not isinstance(variables, dict):
                return ParseError("'variables' must be an object")
            data = _resolve_variables(data, variables)

        for required in ('title', 'identifier'):
            if required not in data:
                return ParseError(f"Missing required field '{required}'")
            if not isinstance(data[required], str):
                return ParseError(f"'{required}' must be a string")

        roles = data.get('roles')
        if roles is not None:
            if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
                return ParseError("'roles' must be a list of strings")

        for name in LIST_FIELDS:
            items = data.get(name, [])
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                return ParseError(f"'{name}' must be a list of objects")

        permissions = data.get('permissions', {})
        if not isinstance(permissions, dict):
            return ParseError("'permissions' must be an object")

        entity = DomainEntity(
            title=data['title'],
            identifier=data['identifier'],
            roles=roles,
            content_types=data.get('content_types', []),
            setting_types=data.get('setting_types', []),
            domain_member_types=data.get('domain_member_types', []),
            permissions=permissions,
        )
        return Parsed(entity)

    def load(self, text: str) -> DomainEntity:
        """
        Parse config text, raising on failure.

        Raises:
            ConfigParseError: if the text cannot be parsed
        """
        result = self.parse(text)
        if isinstance(result, ParseError):
            raise result.to_exception()
        return result.entity
