"""Application service for domain membership and invitations."""
import logging
import secrets
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from cms_admin.apps.domains.domain.exceptions import (
    DomainNotFound,
    DomainValidationError,
    MembershipError,
    ValidationViolation
)
from cms_admin.apps.domains.domain.interfaces import NotifierInterface
from cms_admin.apps.domains.domain.models import Violation
from cms_admin.apps.domains.infrastructure.orm import (
    ApiKey,
    DomainInvitation,
    DomainMember,
    DomainMemberType
)

logger = logging.getLogger(__name__)

INVITATION_TEMPLATE = 'domains/emails/invitation.html'
INVITATION_TOKEN_BYTES = 32


def accessor_ref(accessor) -> str:
    """Reference an API key or user as "api_key:<id>" / "user:<id>"."""
    kind = 'api_key' if isinstance(accessor, ApiKey) else 'user'
    return f"{kind}:{accessor.pk}"


def accessor_label(accessor) -> str:
    if hasattr(accessor, 'label'):
        return accessor.label()
    return accessor.get_username()


def filter_candidates(accessors: Iterable[Any], taken_refs: Iterable[str]) -> List[Any]:
    """Drop accessors that are already members."""
    taken = set(taken_refs)
    return [accessor for accessor in accessors if accessor_ref(accessor) not in taken]


def generate_invitation_token() -> str:
    """URL-safe base64 of 32 random bytes, without padding."""
    return secrets.token_urlsafe(INVITATION_TOKEN_BYTES)


class MembershipService:
    """Manages the members and invitations of a domain member type."""

    def __init__(self, notifier: NotifierInterface, invitation_url: str):
        """
        Initialize the membership service.

        Args:
            notifier: Sends invitation emails
            invitation_url: URL template with a "{token}" placeholder
        """
        self.notifier = notifier
        self.invitation_url = invitation_url

    def get_member_type(self, organization: str, domain: str, member_type: str) -> DomainMemberType:
        """
        Raises:
            DomainNotFound: if the domain or member type does not exist
        """
        try:
            return DomainMemberType.objects.select_related('domain__organization').get(
                domain__organization__identifier=organization,
                domain__identifier=domain,
                identifier=member_type
            )
        except DomainMemberType.DoesNotExist:
            raise DomainNotFound(f"Member type '{member_type}' of domain '{organization}/{domain}' not found")

    def list_members(self, member_type: DomainMemberType) -> Tuple[QuerySet, QuerySet]:
        """Members and open invitations of a member type, as querysets for paging."""
        members = member_type.members.select_related('user', 'api_key')
        invitations = member_type.invitations.all()
        return members, invitations

    def candidate_accessors(self, member_type: DomainMemberType) -> List[Any]:
        """API keys and users of the organization that are not members of this member type yet."""
        organization = member_type.domain.organization
        taken = [member.accessor_ref for member in member_type.members.all()]

        api_keys = list(organization.api_keys.all())
        users = [membership.user for membership in organization.members.select_related('user')]

        return filter_candidates(api_keys, taken) + filter_candidates(users, taken)

    def _check_roles(self, member_type: DomainMemberType, roles: List[str]) -> None:
        available = member_type.domain.roles
        for role in roles:
            if role not in available:
                raise ValidationViolation(Violation('roles', f'"{role}" is not a valid role of this domain.'))

    def _resolve_accessor(self, member_type: DomainMemberType, ref: str):
        kind, _, pk = ref.partition(':')
        organization = member_type.domain.organization

        if kind == 'api_key':
            accessor = organization.api_keys.filter(pk=pk).first()
        elif kind == 'user':
            accessor = get_user_model().objects.filter(
                pk=pk, organization_memberships__organization=organization
            ).first()
        else:
            accessor = None

        if accessor is None:
            raise MembershipError(f"Unknown accessor '{ref}'")
        return accessor

    def add_member(self, member_type: DomainMemberType, ref: str, roles: List[str]) -> DomainMember:
        """
        Add an API key or organization user as a member.

        Raises:
            MembershipError: if the accessor is unknown or already a member
            ValidationViolation: if a role is not available in the domain
        """
        accessor = self._resolve_accessor(member_type, ref)
        if accessor not in self.candidate_accessors(member_type):
            raise MembershipError(f"'{accessor_label(accessor)}' is already a member")

        self._check_roles(member_type, roles)

        member = DomainMember(domain=member_type.domain, member_type=member_type, roles=roles)
        if isinstance(accessor, ApiKey):
            member.api_key = accessor
        else:
            member.user = accessor
        member.save()

        logger.info(f"Added {ref} to member type '{member_type.identifier}' of domain '{member_type.domain}'")
        return member

    def invite(self, member_type: DomainMemberType, email: str, roles: List[str]) -> DomainInvitation:
        """
        Invite a user by email.

        The invitation is stored before the email is sent; a failing email is
        logged and not retried.

        Raises:
            ValidationViolation: if a role is not available in the domain
        """
        self._check_roles(member_type, roles)

        invitation = DomainInvitation.objects.create(
            member_type=member_type,
            email=email,
            roles=roles,
            token=generate_invitation_token(),
            requested_at=timezone.now()
        )

        try:
            self.notifier.send(email, INVITATION_TEMPLATE, {
                'invitation': invitation,
                'invitation_url': self.invitation_url.format(token=invitation.token),
            })
        except Exception as e:
            logger.error(f"Error sending invitation to {email}: {e}")

        return invitation

    def update_member(self, member: DomainMember, data: Dict[str, Any]) -> DomainMember:
        """
        Update roles and data of a member.

        "roles" is taken out of the payload, the rest replaces the member data.

        Raises:
            ValidationViolation: if a role is not available in the domain
            DomainValidationError: if the data contains fields the member type does not define
        """
        data = dict(data)
        roles: Optional[List[str]] = data.pop('roles', None)

        if roles is not None:
            self._check_roles(member.member_type, roles)

        known_fields = {f.get('identifier') for f in member.member_type.fields}
        violations = [Violation(f'data[{key}]', 'This field is not defined on the member type.')
                      for key in data if key not in known_fields]
        if violations:
            raise DomainValidationError(violations)

        with transaction.atomic():
            if roles is not None:
                member.roles = roles
            member.data = data
            member.save()

        return member

    def remove_member(self, member: DomainMember) -> None:
        logger.info(f"Removing {member.accessor_ref} from domain '{member.domain}'")
        member.delete()

    def remove_invitation(self, invitation: DomainInvitation) -> None:
        logger.info(f"Removing invitation of {invitation.email}")
        invitation.delete()


def get_membership_service() -> MembershipService:
    """Create a membership service from settings."""
    from django.conf import settings
    from cms_admin.apps.domains.infrastructure.notifier import get_notifier

    return MembershipService(get_notifier(), settings.INVITATION_URL)
