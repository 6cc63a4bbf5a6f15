"""Migration of legacy inline config variables into the config text.

Older domains stored their variables next to the config instead of inside
it. The first time such a domain is written to the filesystem, the values
are swapped back for their variable names and a "variables" key is added.

The swap is a literal text replacement of each JSON-encoded value on the
single-line, key-sorted form of the config. A list or object value matches
wherever an equal structure appears. A value that also appears in an
unrelated place (or as part of a longer number) is replaced there too.
This matches how the variables were stored and is kept as-is.
"""
import json
import logging
from typing import Any, Dict

from cms_admin.apps.domains.domain.codec import canonical_value, dump_json
from cms_admin.apps.domains.domain.exceptions import ConfigParseError

logger = logging.getLogger(__name__)

LEADING_KEYS = ['title', 'identifier', 'variables']


def migrate_legacy_variables(config_text: str, variables: Dict[str, Any]) -> str:
    """
    Fold legacy variables back into config text.

    Args:
        config_text: Serialized config with variable values inlined
        variables: Legacy variables, name -> value

    Returns:
        Config text with values replaced by variable names, a "variables"
        key, and "title", "identifier", "variables" as the leading keys

    Raises:
        ConfigParseError: if the replacement produced invalid JSON
    """
    if not variables:
        return config_text

    try:
        data = json.loads(config_text)
    except ValueError as e:
        raise ConfigParseError(f"Could not migrate legacy config variables: {e}")

    # Single-line text with sorted nested keys, so list and object values match
    text = json.dumps({key: canonical_value(value) for key, value in data.items()}, ensure_ascii=False)
    for name, value in variables.items():
        encoded = json.dumps(canonical_value(value), ensure_ascii=False)
        text = text.replace(encoded, json.dumps(name, ensure_ascii=False))

    try:
        data = json.loads(text)
    except ValueError as e:
        raise ConfigParseError(f"Could not migrate legacy config variables: {e}")

    data['variables'] = variables

    ordered = {key: data[key] for key in LEADING_KEYS if key in data}
    for key, value in data.items():
        if key not in ordered:
            ordered[key] = value

    logger.info(f"Migrated {len(variables)} legacy config variables")
    return dump_json(ordered)
