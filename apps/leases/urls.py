from django.urls import path

from . import views

app_name = "leases_signing"

urlpatterns = [
    path("leases/pending-signatures/", views.pending_signatures, name="pending_signatures"),
    path("leases/<uuid:pk>/signing/", views.lease_for_signing, name="lease_for_signing"),
    path("leases/<uuid:pk>/sign/", views.sign_lease, name="sign_lease"),
    path("leases/<uuid:pk>/resend-invitation/", views.resend_signing_invitation, name="resend_invitation"),
]
