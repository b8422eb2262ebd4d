from django.urls import path

from . import views

app_name = "communications"

urlpatterns = [
    path("notifications/read/", views.mark_read, name="mark_read"),
]
