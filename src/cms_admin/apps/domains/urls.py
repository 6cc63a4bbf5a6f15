from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DomainMemberViewSet, DomainViewSet

router = DefaultRouter()
router.register(r'organizations/(?P<organization>[A-Za-z0-9_-]+)/domains', DomainViewSet, basename='domain')
router.register(
    r'organizations/(?P<organization>[A-Za-z0-9_-]+)/domains/(?P<domain>[a-z0-9_]+)/members/(?P<member_type>[a-z0-9_]+)',
    DomainMemberViewSet,
    basename='domain-member'
)

urlpatterns = [
    path('', include(router.urls)),
]
