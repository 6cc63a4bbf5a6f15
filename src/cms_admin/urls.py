from django.urls import path, include

urlpatterns = [
    path('api/', include('cms_admin.apps.domains.urls')),
]
