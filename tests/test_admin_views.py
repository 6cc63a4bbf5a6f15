# tests/test_admin_views.py
from cms_admin.apps.domains.domain.admin_views import TableAdminViewType, admin_views_for
from cms_admin.apps.domains.domain.models import DomainEntity


def test_default_table_view(entity):
    views = admin_views_for(entity)

    assert len(views) == 1
    view = views[0]
    assert view.type == 'table'
    assert view.return_type == 'TableAdminView'
    assert view.category == 'content'
    assert view.content_type == 'article'
    assert view.config == {'limit': 20, 'orderBy': [{'field': 'created', 'order': 'DESC'}]}


def test_default_order_is_not_shared():
    first = TableAdminViewType().create_view('content', 'a')
    first.config['orderBy'][0]['order'] = 'ASC'

    second = TableAdminViewType().create_view('content', 'b')

    assert second.config['orderBy'] == [{'field': 'created', 'order': 'DESC'}]


def test_table_settings():
    directive = {
        'type': 'table',
        'settings': {
            'limit': 50,
            'orderBy': [{'field': 'title', 'order': 'ASC'}],
            'filter': {'field': 'published', 'value': True},
        },
    }

    view = TableAdminViewType().create_view('content', 'article', directive)

    assert view.config == {
        'limit': 50,
        'orderBy': [{'field': 'title', 'order': 'ASC'}],
        'filter': {'field': 'published', 'value': True},
    }


def test_empty_filter_is_dropped():
    directive = {'settings': {'filter': {'AND': [], 'OR': []}}}

    view = TableAdminViewType().create_view('content', 'article', directive)

    assert 'filter' not in view.config


def test_or_filter_is_kept():
    directive = {'settings': {'filter': {'OR': [{'field': 'a', 'value': 1}]}}}

    view = TableAdminViewType().create_view('content', 'article', directive)

    assert view.config['filter'] == {'OR': [{'field': 'a', 'value': 1}]}


def test_directives_per_content_type():
    entity = DomainEntity(title='Shop', identifier='shop', organization='acme', content_types=[
        {'identifier': 'product', 'admin_views': [
            {'type': 'table', 'category': 'catalog', 'settings': {'limit': 5}},
            {'type': 'tree'},
        ]},
        {'identifier': 'order'},
    ])

    views = admin_views_for(entity)

    assert [(v.content_type, v.category, v.config['limit']) for v in views] == [
        ('product', 'catalog', 5),
        ('order', 'content', 20),
    ]


def test_no_content_types():
    assert admin_views_for(DomainEntity(title='Empty', identifier='empty')) == []


def test_admin_views_given_as_mapping_are_skipped():
    entity = DomainEntity(title='Shop', identifier='shop', organization='acme', content_types=[
        {'identifier': 'product', 'admin_views': {'table': {}}},
        {'identifier': 'order', 'admin_views': ['table']},
        {'identifier': 'customer'},
    ])

    views = admin_views_for(entity)

    assert [v.content_type for v in views] == ['customer']


def test_settings_that_are_not_objects_fall_back_to_defaults():
    entity = DomainEntity(title='Shop', identifier='shop', organization='acme', content_types=[
        {'identifier': 'product', 'admin_views': [
            {'type': 'table', 'settings': 'compact'},
            {'type': 'table', 'settings': {'limit': 5, 'filter': 'published'}},
        ]},
    ])

    views = admin_views_for(entity)

    assert [v.config for v in views] == [
        {'limit': 20, 'orderBy': [{'field': 'created', 'order': 'DESC'}]},
        {'limit': 5, 'orderBy': [{'field': 'created', 'order': 'DESC'}]},
    ]
