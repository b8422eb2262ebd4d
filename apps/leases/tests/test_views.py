import json
import uuid
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse

from apps.leases import lifecycle
from apps.leases.models import LeaseSignature

from .base import SIGNATURE_IMAGE, LeaseSigningSetupMixin


class LeaseSigningViewTests(LeaseSigningSetupMixin, TestCase):

    def setUp(self):
        self.lease = self._make_lease([self.tenant_a])
        self.signing_url = reverse("leases_signing:lease_for_signing", args=[self.lease.pk])
        self.sign_url = reverse("leases_signing:sign_lease", args=[self.lease.pk])
        self.pending_url = reverse("leases_signing:pending_signatures")
        self.resend_url = reverse("leases_signing:resend_invitation", args=[self.lease.pk])

    def _post_json(self, url, data, **extra):
        with self.captureOnCommitCallbacks(execute=True):
            return self.client.post(url, data=json.dumps(data), content_type="application/json", **extra)

    def test_anonymous_requests_get_401(self):
        for method, url in (
            ("get", self.signing_url),
            ("post", self.sign_url),
            ("get", self.pending_url),
            ("post", self.resend_url),
        ):
            with self.subTest(url=url):
                response = getattr(self.client, method)(url)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(
                    response.json(),
                    {"success": False, "error": "Unauthorized", "code": "unauthorized"},
                )

    def test_get_lease_for_signing(self):
        self.client.force_login(self.tenant_a_user)

        response = self.client.get(self.signing_url)

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["id"], str(self.lease.pk))
        self.assertEqual(data["status"], "draft")
        self.assertEqual(data["status_display"], "Drafting")
        self.assertEqual(data["unit"]["property"]["name"], "Maple Court")
        self.assertEqual(data["landlord"]["name"], "Lana Lord")
        self.assertEqual(len(data["tenants"]), 1)
        self.assertEqual(data["signing_progress"]["total_needed"], 2)
        self.assertEqual(data["signing_progress"]["percentage"], 0)
        self.assertEqual(
            data["user_signing_status"],
            {"can_sign": True, "has_signed": False, "signed_at": None, "role": "tenant"},
        )

    def test_signing_endpoint_rejects_post(self):
        self.client.force_login(self.tenant_a_user)
        self.assertEqual(self.client.post(self.signing_url).status_code, 405)

    def test_stranger_gets_403(self):
        self.client.force_login(self.stranger_user)

        response = self.client.get(self.signing_url)

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "unauthorized")
        self.assertFalse(response.json()["success"])

    def test_unknown_lease_gets_404(self):
        self.client.force_login(self.tenant_a_user)

        response = self.client.get(reverse("leases_signing:lease_for_signing", args=[uuid.uuid4()]))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Lease not found")

    def test_sign_with_json_body(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(
            self.sign_url,
            {"signature": SIGNATURE_IMAGE, "agreed_to_terms": True},
            HTTP_USER_AGENT="TestBrowser/1.0",
            REMOTE_ADDR="198.51.100.4",
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Lease signed successfully. Waiting for other signatures.")
        self.assertFalse(body["data"]["activated"])
        signature = LeaseSignature.objects.get(lease=self.lease)
        self.assertEqual(signature.ip_address, "198.51.100.4")
        self.assertEqual(signature.user_agent, "TestBrowser/1.0")

    def test_sign_with_form_body_activates(self):
        self._sign(self.tenant_a_user, self.lease)
        self.client.force_login(self.landlord_user)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                self.sign_url,
                {"signature": "Lana Lord", "agreed_to_terms": "on"},
                HTTP_X_FORWARDED_FOR="192.0.2.10, 10.0.0.1",
            )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["data"]["activated"])
        self.assertEqual(body["data"]["status"], lifecycle.ACTIVE)
        self.assertEqual(body["data"]["unit"]["status"], "occupied")
        self.assertEqual(body["message"], "Lease signed successfully! The lease is now active.")
        self.assertEqual(
            LeaseSignature.objects.get(signer_type="landlord").ip_address, "192.0.2.10"
        )

    def test_sign_without_terms_gets_400(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(self.sign_url, {"signature": SIGNATURE_IMAGE, "agreed_to_terms": False})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "terms_not_accepted")
        self.assertFalse(LeaseSignature.objects.exists())

    def test_sign_without_signature_gets_400(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(self.sign_url, {"agreed_to_terms": True})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "signature_required")

    def test_sign_twice_gets_409(self):
        self._sign(self.tenant_a_user, self.lease)
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(self.sign_url, {"signature": SIGNATURE_IMAGE, "agreed_to_terms": True})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "already_signed")

    def test_sign_active_lease_gets_409(self):
        self.lease.status = lifecycle.ACTIVE
        self.lease.save()
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(self.sign_url, {"signature": SIGNATURE_IMAGE, "agreed_to_terms": True})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "This lease is not available for signing")

    def test_invalid_ip_address_gets_400(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(
            self.sign_url,
            {"signature": SIGNATURE_IMAGE, "agreed_to_terms": True, "ip_address": "999.1.1.1"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "Invalid value for: ip_address", "code": "invalid_request"},
        )
        self.assertFalse(LeaseSignature.objects.exists())

    def test_oversized_user_agent_gets_400(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(
            self.sign_url,
            {"signature": SIGNATURE_IMAGE, "agreed_to_terms": True, "user_agent": "x" * 501},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_request")
        self.assertFalse(LeaseSignature.objects.exists())

    def test_submitted_metadata_is_recorded(self):
        self.client.force_login(self.tenant_a_user)

        response = self._post_json(
            self.sign_url,
            {
                "signature": SIGNATURE_IMAGE,
                "agreed_to_terms": True,
                "ip_address": "203.0.113.50",
                "user_agent": "SigningApp/2.1",
            },
            REMOTE_ADDR="10.0.0.1",
        )

        self.assertEqual(response.status_code, 200)
        signature = LeaseSignature.objects.get(lease=self.lease)
        self.assertEqual(signature.ip_address, "203.0.113.50")
        self.assertEqual(signature.user_agent, "SigningApp/2.1")

    def test_malformed_json_treated_as_empty(self):
        self.client.force_login(self.tenant_a_user)

        response = self.client.post(self.sign_url, data="{not json", content_type="application/json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "terms_not_accepted")

    def test_pending_signatures(self):
        self.client.force_login(self.tenant_a_user)

        response = self.client.get(self.pending_url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual([lease["id"] for lease in response.json()["data"]], [str(self.lease.pk)])

    def test_resend_invitation(self):
        self.client.force_login(self.landlord_user)

        response = self.client.post(self.resend_url)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["data"], {"reminders_sent": 2})
        self.assertEqual(body["message"], "Signing reminders sent successfully (2 recipient(s))")

    def test_resend_by_tenant_gets_403(self):
        self.client.force_login(self.tenant_a_user)
        self.assertEqual(self.client.post(self.resend_url).status_code, 403)

    def test_unexpected_error_is_logged_and_generic(self):
        self.client.force_login(self.tenant_a_user)

        with patch("apps.leases.signing.get_pending_signatures", side_effect=RuntimeError("kaboom")):
            with self.assertLogs("apps.leases.views", level="ERROR"):
                response = self.client.get(self.pending_url)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(
            response.json(),
            {"success": False, "error": "Failed to fetch pending signatures", "code": "infrastructure"},
        )
