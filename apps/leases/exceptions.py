"""
Lease signing errors.

Each error carries a stable ``code``, the HTTP status the JSON views answer
with, and a short user-facing message. Nothing internal goes in the message.
"""


class LeaseSigningError(Exception):
    code = "error"
    status_code = 400
    default_message = "Something went wrong."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(LeaseSigningError):
    code = "unauthorized"
    status_code = 403
    default_message = "Unauthorized"


class LeaseNotFound(LeaseSigningError):
    code = "not_found"
    status_code = 404
    default_message = "Lease not found"


class LeaseNotAvailable(LeaseSigningError):
    code = "not_available"
    status_code = 409
    default_message = "This lease is not available for signing"


class TermsNotAccepted(LeaseSigningError):
    code = "terms_not_accepted"
    status_code = 400
    default_message = "You must agree to the terms to sign the lease"


class SignatureRequired(LeaseSigningError):
    code = "signature_required"
    status_code = 400
    default_message = "Please provide your signature"


class AlreadySigned(LeaseSigningError):
    code = "already_signed"
    status_code = 409
    default_message = "You have already signed this lease"


class SigningUnavailable(LeaseSigningError):
    """Store or infrastructure failure; safe for the caller to retry."""

    code = "infrastructure"
    status_code = 503
    default_message = "Failed to sign lease. Please try again."


class InvalidSigningRequest(LeaseSigningError):
    """Malformed request metadata (client IP or user agent)."""

    code = "invalid_request"
    status_code = 400
    default_message = "Invalid signing request"
