# tests/test_drift.py
import json

import pytest

from cms_admin.apps.domains.domain.drift import DriftDetector
from cms_admin.apps.domains.domain.exceptions import ConfigSourceError
from cms_admin.apps.domains.domain.models import DomainEntity, DriftResult


@pytest.fixture
def detector(codec):
    return DriftDetector(codec)


def test_reflexive(detector, codec, entity):
    """An entity never drifts from its own serialization."""
    result = detector.detect(entity, codec.serialize(entity))

    assert result.status == DriftResult.NO_DRIFT
    assert result.filesystem_config is None


def test_formatting_is_ignored(detector, codec, entity):
    """Compact, reordered text with the same meaning is not drift."""
    data = json.loads(codec.serialize(entity))
    reordered = {key: data[key] for key in reversed(list(data))}

    result = detector.detect(entity, json.dumps(reordered, separators=(',', ':')))

    assert result.status == DriftResult.NO_DRIFT


def test_nested_key_order_is_ignored(detector):
    entity = DomainEntity(title='T', identifier='t', organization='acme', permissions={'a': '1', 'b': '2'})

    result = detector.detect(entity, '{"title": "T", "identifier": "t", "permissions": {"b": "2", "a": "1"}}')

    assert not result.has_drift


def test_missing_on_filesystem(detector, entity):
    result = detector.detect(entity, None)

    assert result.is_missing
    assert not result.has_drift


def test_drift_carries_canonical_filesystem_config(detector, codec, entity):
    result = detector.detect(entity, json.dumps({'identifier': 'blog', 'title': 'Changed Blog'}))

    assert result.has_drift
    assert json.loads(result.filesystem_config)['title'] == 'Changed Blog'
    assert result.filesystem_config == codec.serialize(codec.load(result.filesystem_config))


def test_invalid_filesystem_config(detector, entity):
    with pytest.raises(ConfigSourceError):
        detector.detect(entity, '{"title": ')
