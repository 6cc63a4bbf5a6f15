# Django looks up models in <app>.models
from cms_admin.apps.domains.infrastructure.orm import (  # noqa: F401
    ApiKey,
    Domain,
    DomainInvitation,
    DomainMember,
    DomainMemberType,
    Organization,
    OrganizationMember
)
