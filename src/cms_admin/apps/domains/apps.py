from django.apps import AppConfig


class DomainsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'cms_admin.apps.domains'
    label = 'domains'
    verbose_name = 'Domains'
