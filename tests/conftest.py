# tests/conftest.py
import os
import shutil
import tempfile

import django
import pytest

# Set up Django environment before anything imports models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cms_admin.settings')
os.environ['CMS_ADMIN_DB_PATH'] = ':memory:'
os.environ['CMS_ADMIN_MAILER_SENDER'] = 'cms@example.com'
django.setup()

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.db import transaction
from django.test.utils import override_settings, setup_test_environment

from cms_admin.apps.domains.application.validation import DomainValidator
from cms_admin.apps.domains.domain.codec import ConfigCodec
from cms_admin.apps.domains.domain.exceptions import ConfigSourceError
from cms_admin.apps.domains.domain.models import DomainEntity
from cms_admin.apps.domains.infrastructure.filesystem import reset_config_source
from cms_admin.apps.domains.infrastructure.orm import ApiKey, Organization, OrganizationMember
from cms_admin.apps.domains.infrastructure.repositories import DjangoDomainStore

setup_test_environment()
call_command('migrate', run_syncdb=True, verbosity=0)


# In-memory config source for testing
class FakeConfigSource:
    def __init__(self, files=None):
        self.files = dict(files or {})
        self.writes = []

    def exists(self, domain_key):
        return domain_key in self.files

    def read(self, domain_key):
        if domain_key not in self.files:
            raise ConfigSourceError(f"No config file for domain '{domain_key}'")
        return self.files[domain_key]

    def write(self, domain_key, text):
        self.writes.append((domain_key, text))
        self.files[domain_key] = text

    def delete(self, domain_key):
        self.files.pop(domain_key, None)

    def list_available(self, organization):
        prefix = f"{organization}/"
        return {key[len(prefix):] for key in self.files if key.startswith(prefix)}


# In-memory store recording every call
class FakeStore:
    def __init__(self):
        self.persisted = []
        self.removed = []
        self.flushes = 0

    def persist(self, entity):
        self.persisted.append(entity)

    def remove(self, entity):
        self.removed.append(entity)

    def flush(self):
        self.flushes += 1


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def codec():
    return ConfigCodec()


@pytest.fixture
def validator():
    return DomainValidator()


@pytest.fixture
def entity():
    """A valid domain entity."""
    return DomainEntity(
        title='Blog',
        identifier='blog',
        organization='acme',
        content_types=[
            {'identifier': 'article', 'title': 'Article', 'fields': [{'identifier': 'headline', 'type': 'text'}]},
        ],
        domain_member_types=[
            {'identifier': 'editor', 'title': 'Editor', 'fields': [{'identifier': 'bio', 'type': 'text'}]},
        ],
        permissions={'view domain': 'true'},
    )


@pytest.fixture
def config_source():
    return FakeConfigSource()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def db():
    """Run a test inside a transaction that is rolled back afterwards."""
    with transaction.atomic():
        yield
        transaction.set_rollback(True)


@pytest.fixture
def config_dir(temp_dir):
    """Point the filesystem config source at a temporary directory."""
    reset_config_source()
    with override_settings(DOMAIN_CONFIG_DIR=temp_dir):
        yield temp_dir
    reset_config_source()


@pytest.fixture
def outbox():
    mail.outbox = []
    return mail.outbox


@pytest.fixture
def organization(db):
    return Organization.objects.create(identifier='acme', title='Acme')


@pytest.fixture
def stored_domain(organization, entity):
    """The entity fixture persisted in the database, without a config file."""
    store = DjangoDomainStore()
    entity.config = ConfigCodec().serialize(entity)
    store.persist(entity)
    store.flush()
    return entity


@pytest.fixture
def user(organization):
    user = get_user_model().objects.create_user('jane', 'jane@example.com', 'secret')
    OrganizationMember.objects.create(organization=organization, user=user)
    return user


@pytest.fixture
def api_key(organization):
    return ApiKey.objects.create(organization=organization, name='Website', token='website-token')
