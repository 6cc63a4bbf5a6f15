"""Admin view types built from content type directives."""
from typing import Any, Dict, List, Optional

from cms_admin.apps.domains.domain.models import AdminView, DomainEntity


class AdminViewType:
    """Base admin view type."""

    TYPE = None
    RETURN_TYPE = None

    def create_view(self, category: str, content_type: Optional[str] = None,
                    directive: Optional[Dict[str, Any]] = None) -> AdminView:
        return AdminView(
            type=self.TYPE,
            return_type=self.RETURN_TYPE,
            category=category,
            content_type=content_type,
        )


class TableAdminViewType(AdminViewType):
    """Tabular content listing."""

    TYPE = 'table'
    RETURN_TYPE = 'TableAdminView'

    DEFAULT_LIMIT = 20
    DEFAULT_ORDER_BY = [{'field': 'created', 'order': 'DESC'}]

    def create_view(self, category: str, content_type: Optional[str] = None,
                    directive: Optional[Dict[str, Any]] = None) -> AdminView:
        settings = (directive or {}).get('settings')
        if not isinstance(settings, dict):
            settings = {}

        config = {
            'limit': settings.get('limit') or self.DEFAULT_LIMIT,
            'orderBy': settings.get('orderBy') or [dict(o) for o in self.DEFAULT_ORDER_BY],
        }

        # Only keep filters that actually filter something
        filter_ = settings.get('filter')
        if isinstance(filter_, dict) and (filter_.get('field') or filter_.get('AND') or filter_.get('OR')):
            config['filter'] = filter_

        view = super().create_view(category, content_type, directive)
        view.config = config
        return view


ADMIN_VIEW_TYPES = {
    TableAdminViewType.TYPE: TableAdminViewType(),
}


def admin_views_for(entity: DomainEntity, category: str = 'content') -> List[AdminView]:
    """
    Build the admin views of every content type of a domain.

    Content types without "admin_views" directives get one default table view.
    Malformed "admin_views" lists, directives that are not objects and
    directives with an unknown type are skipped.
    """
    views = []
    for content_type in entity.content_types:
        identifier = content_type.get('identifier')
        directives = content_type.get('admin_views') or [{'type': TableAdminViewType.TYPE}]
        if not isinstance(directives, list):
            continue

        for directive in directives:
            if not isinstance(directive, dict):
                continue
            view_type = ADMIN_VIEW_TYPES.get(directive.get('type', TableAdminViewType.TYPE))
            if view_type is None:
                continue
            views.append(view_type.create_view(directive.get('category', category), identifier, directive))

    return views
