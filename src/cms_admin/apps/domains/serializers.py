"""DRF serializers for domains and domain membership."""
import json

from rest_framework import serializers

from cms_admin.apps.domains.domain.models import FlowAction
from cms_admin.apps.domains.infrastructure.orm import DomainInvitation, DomainMember


class DomainEntitySerializer(serializers.Serializer):
    """Read-only view of a DomainEntity."""

    title = serializers.CharField()
    identifier = serializers.CharField()
    organization = serializers.CharField()
    roles = serializers.ListField(child=serializers.CharField())
    content_types = serializers.ListField(child=serializers.DictField())
    setting_types = serializers.ListField(child=serializers.DictField())
    domain_member_types = serializers.ListField(child=serializers.DictField())
    permissions = serializers.DictField()
    config = serializers.CharField()


class DomainConfigSerializer(serializers.Serializer):
    """Config text submitted from the domain editor."""

    config = serializers.CharField(trim_whitespace=False)

    def to_internal_value(self, data):
        # Accept the config as a JSON object as well as text
        if isinstance(data, dict) and isinstance(data.get('config'), dict):
            data = dict(data)
            data['config'] = json.dumps(data['config'])
        return super().to_internal_value(data)


class ReconcileSerializer(DomainConfigSerializer):
    action = serializers.ChoiceField(choices=[a.value for a in FlowAction], default=FlowAction.SUBMIT.value)


class ReconciliationOutcomeSerializer(serializers.Serializer):
    state = serializers.CharField()
    seed = serializers.CharField()
    diff_against = serializers.CharField(allow_null=True)
    warnings = serializers.ListField(child=serializers.DictField())
    errors = serializers.DictField(child=serializers.ListField(child=serializers.CharField()))
    form_disabled = serializers.BooleanField()
    original = serializers.CharField(allow_null=True)
    updated = serializers.CharField(allow_null=True)


class AdminViewSerializer(serializers.Serializer):
    type = serializers.CharField()
    return_type = serializers.CharField()
    category = serializers.CharField()
    content_type = serializers.CharField(allow_null=True)
    config = serializers.DictField()


class DomainMemberSerializer(serializers.ModelSerializer):
    accessor = serializers.CharField(source='accessor_ref', read_only=True)
    label = serializers.CharField(read_only=True)

    class Meta:
        model = DomainMember
        fields = ('id', 'accessor', 'label', 'roles', 'data', 'created_at')
        read_only_fields = fields


class DomainInvitationSerializer(serializers.ModelSerializer):
    class Meta:
        model = DomainInvitation
        fields = ('id', 'email', 'roles', 'requested_at')
        read_only_fields = fields


class AddMemberSerializer(serializers.Serializer):
    accessor = serializers.RegexField(r'^(api_key|user):\d+$')
    roles = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class InviteSerializer(serializers.Serializer):
    email = serializers.EmailField()
    roles = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class UpdateMemberSerializer(serializers.Serializer):
    roles = serializers.ListField(child=serializers.CharField(), required=False)
    data = serializers.DictField(required=False, default=dict)
