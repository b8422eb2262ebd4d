from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("django-admin/", admin.site.urls),
    path("api/", include("apps.leases.urls")),
    path("api/", include("apps.communications.urls")),
]
