"""Repository implementations for domains."""
import logging
from typing import List, Optional

from django.db import DatabaseError, transaction
from django.db.models import Q

from cms_admin.apps.domains.domain.exceptions import ConfigSourceError, PersistenceError
from cms_admin.apps.domains.domain.interfaces import ConfigSourceInterface
from cms_admin.apps.domains.domain.models import DomainEntity
from cms_admin.apps.domains.infrastructure.orm import (
    Domain as DomainOrm,
    DomainInvitation,
    DomainMember,
    DomainMemberType,
    Organization
)

logger = logging.getLogger(__name__)


class DjangoDomainStore:
    """
    Django ORM-based unit of work for domains.

    persist() and remove() only schedule changes; flush() writes them in one
    transaction, together with the config files of entities whose config changed.
    """

    def __init__(self, config_source: Optional[ConfigSourceInterface] = None):
        self.config_source = config_source
        self._to_persist: List[DomainEntity] = []
        self._to_remove: List[DomainEntity] = []

    # ---------- queries ----------

    def get(self, organization: str, identifier: str) -> Optional[DomainEntity]:
        """
        Get a domain by organization and identifier.

        Returns:
            Domain entity or None if not found
        """
        try:
            orm_domain = DomainOrm.objects.select_related('organization').get(
                organization__identifier=organization, identifier=identifier
            )
        except DomainOrm.DoesNotExist:
            return None
        return self._orm_to_domain(orm_domain)

    def find_by_organization(self, organization: str) -> List[DomainEntity]:
        orm_domains = DomainOrm.objects.select_related('organization').filter(
            organization__identifier=organization
        )
        return [self._orm_to_domain(orm_domain) for orm_domain in orm_domains]

    def organization_exists(self, organization: str) -> bool:
        return Organization.objects.filter(identifier=organization).exists()

    def identifier_taken(self, organization: str, identifier: str, exclude_id: Optional[int] = None) -> bool:
        query = DomainOrm.objects.filter(organization__identifier=organization, identifier=identifier)
        if exclude_id is not None:
            query = query.exclude(id=exclude_id)
        return query.exists()

    def membership_count(self, entity: DomainEntity) -> int:
        if entity.id is None:
            return 0
        members = DomainMember.objects.filter(domain_id=entity.id).count()
        invitations = DomainInvitation.objects.filter(member_type__domain_id=entity.id).count()
        return members + invitations

    # ---------- unit of work ----------

    def persist(self, entity: DomainEntity) -> None:
        if not any(pending is entity for pending in self._to_persist):
            self._to_persist.append(entity)

    def remove(self, entity: DomainEntity) -> None:
        self._to_persist = [pending for pending in self._to_persist if pending is not entity]
        self._to_remove.append(entity)

    def flush(self) -> None:
        to_persist, self._to_persist = self._to_persist, []
        to_remove, self._to_remove = self._to_remove, []

        try:
            with transaction.atomic():
                stale_keys = []
                for entity in to_persist:
                    stale_key = self._save(entity)
                    if stale_key is not None:
                        stale_keys.append(stale_key)
                for entity in to_remove:
                    DomainOrm.objects.filter(id=entity.id).delete()
                    logger.info(f"Removed domain '{entity.domain_key}'")

                # Config files are written last so a failed write rolls back the database
                for entity in to_persist:
                    if entity.config_changed and self.config_source is not None:
                        self.config_source.write(entity.domain_key, entity.config)

                # Configs left behind by an identifier change
                if self.config_source is not None:
                    for key in stale_keys:
                        if self.config_source.exists(key):
                            self.config_source.delete(key)
                            logger.info(f"Removed stale config '{key}'")
        except (DatabaseError, Organization.DoesNotExist, ConfigSourceError) as e:
            logger.error(f"Error flushing domains: {e}")
            raise PersistenceError(str(e)) from e

        for entity in to_persist:
            entity.config_changed = False
        for entity in to_remove:
            entity.id = None

    def _save(self, entity: DomainEntity) -> Optional[str]:
        """Write one entity, returning the key of its old config if the identifier changed."""
        organization = Organization.objects.get(identifier=entity.organization)
        defaults = {
            'identifier': entity.identifier,
            'title': entity.title,
            'roles': entity.roles,
            'content_types': entity.content_types,
            'setting_types': entity.setting_types,
            'domain_member_types': entity.domain_member_types,
            'permissions': entity.permissions,
            'config': entity.config,
            'config_variables': entity.config_variables,
        }

        stale_key = None
        if entity.id is None:
            orm_domain = DomainOrm.objects.create(organization=organization, **defaults)
            entity.id = orm_domain.id
            logger.info(f"Created domain '{entity.domain_key}'")
        else:
            previous = DomainOrm.objects.filter(id=entity.id).values_list('identifier', flat=True).first()
            if previous is not None and previous != entity.identifier:
                stale_key = f"{entity.organization}/{previous}"
            DomainOrm.objects.filter(id=entity.id).update(**defaults)
            orm_domain = DomainOrm.objects.get(id=entity.id)
            logger.info(f"Updated domain '{entity.domain_key}'")

        self._sync_member_types(orm_domain, entity)
        return stale_key

    def _sync_member_types(self, orm_domain: DomainOrm, entity: DomainEntity) -> None:
        """Create, update and delete member type rows to match the config."""
        identifiers = []
        for member_type in entity.domain_member_types:
            identifier = member_type['identifier']
            identifiers.append(identifier)
            DomainMemberType.objects.update_or_create(
                domain=orm_domain,
                identifier=identifier,
                defaults={
                    'title': member_type.get('title', identifier),
                    'fields': member_type.get('fields', []),
                }
            )

        DomainMemberType.objects.filter(domain=orm_domain).filter(~Q(identifier__in=identifiers)).delete()

    def _orm_to_domain(self, orm_domain: DomainOrm) -> DomainEntity:
        """Convert ORM model to domain model."""
        return DomainEntity(
            id=orm_domain.id,
            title=orm_domain.title,
            identifier=orm_domain.identifier,
            organization=orm_domain.organization.identifier,
            roles=list(orm_domain.roles),
            content_types=list(orm_domain.content_types),
            setting_types=list(orm_domain.setting_types),
            domain_member_types=list(orm_domain.domain_member_types),
            permissions=dict(orm_domain.permissions),
            config=orm_domain.config,
            config_variables=dict(orm_domain.config_variables or {}),
        )
