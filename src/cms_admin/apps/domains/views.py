"""DRF ViewSets – lean, all heavy lifting stays in the application services."""
import logging
from dataclasses import asdict

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.settings import api_settings

from cms_admin.apps.domains.application.membership import (
    accessor_label,
    accessor_ref,
    get_membership_service
)
from cms_admin.apps.domains.application.services import get_domain_service
from cms_admin.apps.domains.domain.exceptions import (
    ConfigParseError,
    ConfigSourceError,
    DomainNotFound,
    DomainValidationError,
    MembershipError,
    ValidationViolation
)
from cms_admin.apps.domains.domain.models import FlowAction
from cms_admin.apps.domains.infrastructure.orm import DomainInvitation, DomainMember
from cms_admin.apps.domains.serializers import (
    AddMemberSerializer,
    AdminViewSerializer,
    DomainConfigSerializer,
    DomainEntitySerializer,
    DomainInvitationSerializer,
    DomainMemberSerializer,
    InviteSerializer,
    ReconcileSerializer,
    ReconciliationOutcomeSerializer,
    UpdateMemberSerializer
)

logger = logging.getLogger(__name__)


class DomainErrorMixin:
    """Translate domain errors to responses. PersistenceError is left to propagate."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainNotFound):
            return Response({'detail': str(exc)}, status=status.HTTP_404_NOT_FOUND)
        if isinstance(exc, ConfigParseError):
            return Response({'config': ['Could not parse domain definition JSON.'], 'detail': str(exc)},
                            status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, DomainValidationError):
            return Response(exc.as_field_errors(), status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, ValidationViolation):
            return Response({exc.violation.property_path: [str(exc.violation)]}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, MembershipError):
            return Response({'detail': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        if isinstance(exc, ConfigSourceError):
            logger.error(f"Config source error: {exc}")
            return Response({'detail': str(exc)}, status=status.HTTP_409_CONFLICT)
        return super().handle_exception(exc)


class DomainViewSet(DomainErrorMixin, viewsets.ViewSet):
    """
    Endpoints:
      • GET    /organizations/<org>/domains/                         (list + missing configs)
      • POST   /organizations/<org>/domains/                         (create)
      • GET    /organizations/<org>/domains/draft/?import=<id>       (editor seed)
      • GET    /organizations/<org>/domains/<id>/                    (view)
      • DELETE /organizations/<org>/domains/<id>/                    (delete)
      • GET    /organizations/<org>/domains/<id>/reconcile/          (start update)
      • POST   /organizations/<org>/domains/<id>/reconcile/          (submit / confirm / back)
      • GET    /organizations/<org>/domains/<id>/admin-views/        (admin views)
    """
    lookup_field = 'identifier'
    lookup_value_regex = '[a-z0-9_]+'

    def list(self, request, organization=None):
        listing = get_domain_service().list_domains(organization)
        return Response({
            'domains': DomainEntitySerializer(listing.domains, many=True).data,
            'missing_identifiers': listing.missing_identifiers,
            'warnings': listing.warnings,
        })

    def create(self, request, organization=None):
        ser = DomainConfigSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entity = get_domain_service().create_domain(organization, ser.validated_data['config'])
        return Response(DomainEntitySerializer(entity).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, organization=None, identifier=None):
        entity = get_domain_service().get_domain(organization, identifier)
        return Response(DomainEntitySerializer(entity).data)

    def destroy(self, request, organization=None, identifier=None):
        get_domain_service().delete_domain(organization, identifier)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ---------- extras ---------------------------------------------
    @action(detail=False, methods=['get'])
    def draft(self, request, organization=None):
        """Initial editor text, blank or imported from the filesystem."""
        import_identifier = request.query_params.get('import')
        config = get_domain_service().draft_domain(organization, import_identifier)
        return Response({'config': config, 'import': import_identifier})

    @action(detail=True, methods=['get', 'post'])
    def reconcile(self, request, organization=None, identifier=None):
        """Two-step update: submit previews, confirm commits, back aborts."""
        svc = get_domain_service()

        if request.method == 'GET':
            _, outcome = svc.start_update(organization, identifier)
        else:
            ser = ReconcileSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            outcome = svc.apply_update(
                organization, identifier,
                ser.validated_data['config'], FlowAction(ser.validated_data['action'])
            )

        data = ReconciliationOutcomeSerializer(outcome).data
        code = status.HTTP_400_BAD_REQUEST if outcome.errors else status.HTTP_200_OK
        return Response(data, status=code)

    @action(detail=True, methods=['get'], url_path='admin-views')
    def admin_views(self, request, organization=None, identifier=None):
        views = get_domain_service().admin_views(organization, identifier)
        return Response(AdminViewSerializer([asdict(v) for v in views], many=True).data)


class DomainMemberViewSet(DomainErrorMixin, viewsets.ViewSet):
    """
    Endpoints below /organizations/<org>/domains/<domain>/members/<member_type>/:
      • GET    ./                      (members + open invitations, paged by
                                       ?members_page= and ?invitations_page=)
      • POST   ./                      (add API key or user)
      • GET    ./candidates/           (accessors that can be added)
      • POST   ./invitations/          (invite by email)
      • DELETE ./invitations/<id>/     (delete invitation)
      • PATCH  ./<id>/                 (update roles and data)
      • DELETE ./<id>/                 (remove member)
    """
    lookup_value_regex = r'\d+'

    def _member(self, member_type, pk):
        try:
            return member_type.members.get(pk=pk)
        except DomainMember.DoesNotExist:
            raise DomainNotFound(f"Member {pk} not found")

    def _page(self, queryset, serializer_class, page_query_param):
        """One page of a listing, each listing has its own page parameter."""
        paginator = api_settings.DEFAULT_PAGINATION_CLASS()
        paginator.page_query_param = page_query_param
        page = paginator.paginate_queryset(queryset, self.request, view=self)
        return paginator.get_paginated_response(serializer_class(page, many=True).data).data

    def list(self, request, organization=None, domain=None, member_type=None):
        svc = get_membership_service()
        members, invitations = svc.list_members(svc.get_member_type(organization, domain, member_type))
        return Response({
            'members': self._page(members, DomainMemberSerializer, 'members_page'),
            'invitations': self._page(invitations, DomainInvitationSerializer, 'invitations_page'),
        })

    def create(self, request, organization=None, domain=None, member_type=None):
        ser = AddMemberSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        svc = get_membership_service()
        member = svc.add_member(
            svc.get_member_type(organization, domain, member_type),
            ser.validated_data['accessor'], ser.validated_data['roles']
        )
        return Response(DomainMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, organization=None, domain=None, member_type=None, pk=None):
        ser = UpdateMemberSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        svc = get_membership_service()
        member = self._member(svc.get_member_type(organization, domain, member_type), pk)

        data = dict(ser.validated_data.get('data', {}))
        if 'roles' in ser.validated_data:
            data['roles'] = ser.validated_data['roles']

        member = svc.update_member(member, data)
        return Response(DomainMemberSerializer(member).data)

    def destroy(self, request, organization=None, domain=None, member_type=None, pk=None):
        svc = get_membership_service()
        svc.remove_member(self._member(svc.get_member_type(organization, domain, member_type), pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ---------- extras ---------------------------------------------
    @action(detail=False, methods=['get'])
    def candidates(self, request, organization=None, domain=None, member_type=None):
        svc = get_membership_service()
        accessors = svc.candidate_accessors(svc.get_member_type(organization, domain, member_type))
        return Response([{'accessor': accessor_ref(a), 'label': accessor_label(a)} for a in accessors])

    @action(detail=False, methods=['post'])
    def invitations(self, request, organization=None, domain=None, member_type=None):
        ser = InviteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        svc = get_membership_service()
        invitation = svc.invite(
            svc.get_member_type(organization, domain, member_type),
            ser.validated_data['email'], ser.validated_data['roles']
        )
        return Response(DomainInvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['delete'], url_path=r'invitations/(?P<invitation_id>\d+)')
    def delete_invitation(self, request, organization=None, domain=None, member_type=None, invitation_id=None):
        svc = get_membership_service()
        member_type_obj = svc.get_member_type(organization, domain, member_type)
        try:
            invitation = member_type_obj.invitations.get(pk=invitation_id)
        except DomainInvitation.DoesNotExist:
            raise DomainNotFound(f"Invitation {invitation_id} not found")

        svc.remove_invitation(invitation)
        return Response(status=status.HTTP_204_NO_CONTENT)
