"""ORM models for domains and domain membership."""
from django.conf import settings
from django.db import models


class Organization(models.Model):
    identifier = models.CharField(max_length=255, unique=True)
    title = models.CharField(max_length=255)

    class Meta:
        app_label = 'domains'
        ordering = ['identifier']

    def __str__(self):
        return self.identifier


class OrganizationMember(models.Model):
    organization = models.ForeignKey(Organization, related_name='members', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='organization_memberships',
                             on_delete=models.CASCADE)

    class Meta:
        app_label = 'domains'
        unique_together = [('organization', 'user')]


class ApiKey(models.Model):
    organization = models.ForeignKey(Organization, related_name='api_keys', on_delete=models.CASCADE)
    name = models.CharField(max_length=255)
    token = models.CharField(max_length=255, unique=True)

    class Meta:
        app_label = 'domains'
        ordering = ['name']

    def label(self) -> str:
        return self.name


class Domain(models.Model):
    organization = models.ForeignKey(Organization, related_name='domains', on_delete=models.CASCADE)
    identifier = models.CharField(max_length=200)
    title = models.CharField(max_length=255)
    roles = models.JSONField(default=list)
    content_types = models.JSONField(default=list)
    setting_types = models.JSONField(default=list)
    domain_member_types = models.JSONField(default=list)
    permissions = models.JSONField(default=dict)
    config = models.TextField(blank=True, default='')
    # Variables of domains created before variables lived inside the config
    config_variables = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = 'domains'
        ordering = ['identifier']
        unique_together = [('organization', 'identifier')]

    def __str__(self):
        return f"{self.organization.identifier}/{self.identifier}"


class DomainMemberType(models.Model):
    domain = models.ForeignKey(Domain, related_name='member_types', on_delete=models.CASCADE)
    identifier = models.CharField(max_length=200)
    title = models.CharField(max_length=255)
    fields = models.JSONField(default=list)

    class Meta:
        app_label = 'domains'
        ordering = ['identifier']
        unique_together = [('domain', 'identifier')]

    def __str__(self):
        return self.identifier


class DomainMember(models.Model):
    domain = models.ForeignKey(Domain, related_name='members', on_delete=models.CASCADE)
    member_type = models.ForeignKey(DomainMemberType, related_name='members', on_delete=models.CASCADE)
    # Exactly one of user / api_key is set
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, related_name='domain_memberships',
                             on_delete=models.CASCADE)
    api_key = models.ForeignKey(ApiKey, null=True, blank=True, related_name='domain_memberships',
                                on_delete=models.CASCADE)
    roles = models.JSONField(default=list)
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = 'domains'
        ordering = ['id']

    @property
    def accessor(self):
        return self.user if self.user_id else self.api_key

    @property
    def accessor_ref(self) -> str:
        return f"user:{self.user_id}" if self.user_id else f"api_key:{self.api_key_id}"

    def label(self) -> str:
        accessor = self.accessor
        return accessor.label() if hasattr(accessor, 'label') else accessor.get_username()


class DomainInvitation(models.Model):
    member_type = models.ForeignKey(DomainMemberType, related_name='invitations', on_delete=models.CASCADE)
    email = models.EmailField()
    roles = models.JSONField(default=list)
    token = models.CharField(max_length=255, unique=True)
    requested_at = models.DateTimeField()

    class Meta:
        app_label = 'domains'
        ordering = ['requested_at']

    def __str__(self):
        return self.email
