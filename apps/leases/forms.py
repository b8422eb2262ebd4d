from django import forms


class SignLeaseForm(forms.Form):
    """Signature submission from the signing screen."""

    # Neither is required here: the signing service reports a missing signature
    # or refused terms itself (TermsNotAccepted first, then SignatureRequired)
    signature = forms.CharField(
        required=False,
        strip=True,
        help_text="Base64 encoded signature image or typed signature",
    )
    agreed_to_terms = forms.BooleanField(
        required=False,
        label="I have read and agree to all terms of this lease agreement",
    )
    ip_address = forms.GenericIPAddressField(required=False)
    user_agent = forms.CharField(required=False, max_length=500)
