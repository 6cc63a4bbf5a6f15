# tests/test_filesystem.py
import os

import pytest

from cms_admin.apps.domains.domain.exceptions import ConfigSourceError
from cms_admin.apps.domains.infrastructure.filesystem import FilesystemConfigSource


@pytest.fixture
def source(temp_dir):
    return FilesystemConfigSource(temp_dir)


def test_write_and_read(source, temp_dir):
    source.write('acme/blog', '{"title": "Blog"}')

    assert source.exists('acme/blog')
    assert source.read('acme/blog') == '{"title": "Blog"}'
    assert os.path.isfile(os.path.join(temp_dir, 'acme', 'blog.json'))


def test_missing_file(source):
    assert not source.exists('acme/blog')

    with pytest.raises(ConfigSourceError):
        source.read('acme/blog')


def test_list_available(source, temp_dir):
    source.write('acme/blog', '{}')
    source.write('acme/shop', '{}')
    source.write('other/news', '{}')
    with open(os.path.join(temp_dir, 'acme', 'notes.txt'), 'w') as f:
        f.write('not a config')

    assert source.list_available('acme') == {'blog', 'shop'}


def test_list_available_without_directory(source):
    assert source.list_available('acme') == set()


@pytest.mark.parametrize('key', ['../etc/passwd', 'acme/../blog', 'acme/', '/blog', 'acme'])
def test_invalid_keys(source, key):
    with pytest.raises(ConfigSourceError):
        source.exists(key)


def test_invalid_organization(source):
    with pytest.raises(ConfigSourceError):
        source.list_available('..')


def test_unicode_round_trip(source):
    source.write('acme/cafe', '{"title": "Café"}')

    assert source.read('acme/cafe') == '{"title": "Café"}'


def test_delete(source, temp_dir):
    source.write('acme/blog', '{}')

    source.delete('acme/blog')

    assert not source.exists('acme/blog')
    assert not os.path.exists(os.path.join(temp_dir, 'acme', 'blog.json'))


def test_delete_missing_file(source):
    source.delete('acme/blog')

    assert not source.exists('acme/blog')
