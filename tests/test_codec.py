# tests/test_codec.py
import json

import pytest

from cms_admin.apps.domains.domain.codec import ConfigCodec, Parsed, ParseError
from cms_admin.apps.domains.domain.exceptions import ConfigParseError
from cms_admin.apps.domains.domain.models import DEFAULT_ROLES, DomainEntity


def test_serialize_is_canonical(codec, entity):
    """Top-level keys follow a fixed order, nested keys are sorted."""
    data = json.loads(codec.serialize(entity))

    assert list(data.keys()) == DomainEntity.CONFIG_FIELDS
    assert list(data['content_types'][0].keys()) == ['fields', 'identifier', 'title']


def test_serialize_is_deterministic(codec, entity):
    assert codec.serialize(entity) == codec.serialize(entity.snapshot())


def test_round_trip(codec, entity):
    """parse(serialize(e)) serializes to the same canonical text."""
    text = codec.serialize(entity)
    result = codec.parse(text)

    assert isinstance(result, Parsed)
    assert codec.serialize(result.entity) == text


def test_parse_is_idempotent_under_codec(codec):
    text = '{"identifier": "news", "title": "News", "permissions": {"b": "1", "a": "2"}}'
    once = codec.serialize(codec.load(text))
    twice = codec.serialize(codec.load(once))

    assert once == twice


def test_parse_defaults(codec):
    entity = codec.load('{"title": "Untitled Domain", "identifier": "untitled"}')

    assert entity.title == 'Untitled Domain'
    assert entity.identifier == 'untitled'
    assert entity.roles == DEFAULT_ROLES
    assert entity.content_types == []
    assert entity.permissions == {}


def test_parse_drops_unknown_keys(codec):
    entity = codec.load('{"title": "T", "identifier": "t", "colour": "red"}')

    assert 'colour' not in codec.serialize(entity)


@pytest.mark.parametrize('text, message', [
    ('{not json', 'not valid JSON'),
    ('[1, 2]', 'must be a JSON object'),
    ('{"identifier": "x"}', "Missing required field 'title'"),
    ('{"title": "x"}', "Missing required field 'identifier'"),
    ('{"title": 1, "identifier": "x"}', "'title' must be a string"),
    ('{"title": "x", "identifier": "x", "roles": "ROLE_A"}', "'roles' must be a list"),
    ('{"title": "x", "identifier": "x", "content_types": {}}', "'content_types' must be a list"),
    ('{"title": "x", "identifier": "x", "setting_types": [1]}', "'setting_types' must be a list"),
    ('{"title": "x", "identifier": "x", "permissions": []}', "'permissions' must be an object"),
    ('{"title": "x", "identifier": "x", "variables": []}', "'variables' must be an object"),
])
def test_parse_errors(codec, text, message):
    result = codec.parse(text)

    assert isinstance(result, ParseError)
    assert message in result.message


def test_parse_none_is_an_error(codec):
    assert isinstance(codec.parse(None), ParseError)


def test_load_raises(codec):
    with pytest.raises(ConfigParseError):
        codec.load('{"title": "x"}')


def test_variables_are_resolved(codec):
    text = json.dumps({
        'title': 'Blog',
        'identifier': 'blog',
        'variables': {'@color': '#fff', '@fields': [{'identifier': 'headline', 'type': 'text'}]},
        'content_types': [
            {'identifier': 'article', 'settings': {'color': '@color'}, 'fields': '@fields'},
        ],
    })

    entity = codec.load(text)

    assert entity.content_types[0]['settings']['color'] == '#fff'
    assert entity.content_types[0]['fields'] == [{'identifier': 'headline', 'type': 'text'}]
    assert 'variables' not in codec.serialize(entity)


def test_non_ascii_kept(codec):
    entity = DomainEntity(title='Café', identifier='cafe')

    assert 'Café' in ConfigCodec().serialize(entity)
