# tests/test_validation.py
import pytest

from cms_admin.apps.domains.application.validation import GROUP_DELETE, DomainValidator
from cms_admin.apps.domains.domain.exceptions import DomainValidationError


def paths(violations):
    return [v.property_path for v in violations]


def test_valid_entity(validator, entity):
    assert validator.validate(entity) == []


@pytest.mark.parametrize('identifier, message', [
    ('', 'This value should not be blank.'),
    ('Blog', 'This value contains invalid characters.'),
    ('my-blog', 'This value contains invalid characters.'),
    ('x' * 201, 'This value is too long. It should have 200 characters or less.'),
])
def test_invalid_identifier(validator, entity, identifier, message):
    entity.identifier = identifier

    violations = validator.validate(entity)

    assert [str(v) for v in violations] == [f'identifier: {message}']


def test_blank_title(validator, entity):
    entity.title = '   '

    assert paths(validator.validate(entity)) == ['title']


def test_missing_organization(validator, entity):
    entity.organization = None

    assert paths(validator.validate(entity)) == ['organization']


def test_identifier_taken(entity):
    calls = []

    def identifier_taken(organization, identifier, exclude_id):
        calls.append((organization, identifier, exclude_id))
        return True

    entity.id = 7
    violations = DomainValidator(identifier_taken=identifier_taken).validate(entity)

    assert [str(v) for v in violations] == ['identifier: This identifier is already taken.']
    assert calls == [('acme', 'blog', 7)]


def test_roles(validator, entity):
    entity.roles = ['ROLE_EDITOR', 'editor', 'ROLE_lower']

    assert paths(validator.validate(entity)) == ['roles[1]', 'roles[2]']


def test_roles_required(validator, entity):
    entity.roles = []

    assert paths(validator.validate(entity)) == ['roles']


def test_type_identifiers(validator, entity):
    entity.content_types = [
        {'identifier': 'article'},
        {'identifier': 'article'},
        {'identifier': 'Bad Name'},
        {'title': 'No identifier'},
    ]

    violations = validator.validate(entity)

    assert [str(v) for v in violations] == [
        'content_types[1].identifier: This identifier is already taken.',
        'content_types[2].identifier: This value contains invalid characters.',
        'content_types[3].identifier: This value should not be blank.',
    ]


def test_same_identifier_in_different_type_lists(validator, entity):
    entity.setting_types = [{'identifier': 'article'}]

    assert validator.validate(entity) == []


def test_admin_views_shape(validator, entity):
    entity.content_types = [
        {'identifier': 'article', 'admin_views': {'table': {}}},
        {'identifier': 'page', 'admin_views': [
            'table',
            {'type': 'table', 'settings': 'compact'},
            {'type': 'table', 'settings': {'filter': 'published'}},
            {'type': 'table', 'settings': {'limit': 5}},
        ]},
    ]

    violations = validator.validate(entity)

    assert [str(v) for v in violations] == [
        'content_types[0].admin_views: This value should be a list of objects.',
        'content_types[1].admin_views[0]: This value should be an object.',
        'content_types[1].admin_views[1].settings: This value should be an object.',
        'content_types[1].admin_views[2].settings.filter: This value should be an object.',
    ]


def test_permission_values_must_be_strings(validator, entity):
    entity.permissions = {'view domain': 'true', 'update domain': True}

    assert paths(validator.validate(entity)) == ['permissions[update domain]']


def test_delete_group(entity):
    validator = DomainValidator(membership_count=lambda e: 2)

    violations = validator.validate(entity, group=GROUP_DELETE)

    assert paths(violations) == ['members']


def test_delete_group_without_members(entity):
    entity.title = ''
    validator = DomainValidator(membership_count=lambda e: 0)

    assert validator.validate(entity, group=GROUP_DELETE) == []


def test_field_errors(validator, entity):
    entity.title = ''
    entity.roles = ['bad']

    error = DomainValidationError(validator.validate(entity))

    assert error.as_field_errors() == {
        'title': ['title: This value should not be blank.'],
        'roles[0]': ['roles[0]: This value should start with ROLE_.'],
    }
