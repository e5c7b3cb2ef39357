"""Enums and form field names shared by the consent sync."""

from enum import StrEnum

# Value submitted by a ticked consent checkbox
CONSENT_CHECKED = "1"

# Location passed to the form renderer on the checkout page
CHECKOUT_LOCATION = "checkout"


class ConsentStatus(StrEnum):
    """Consent status of a contact on one channel."""

    SUBSCRIBED = "subscribed"
    NOT_SUBSCRIBED = "not_subscribed"
    UNKNOWN = "unknown"

    @classmethod
    def from_omnisend(cls, status):
        """Map an Omnisend channel status to a consent status."""
        if status == "subscribed":
            return cls.SUBSCRIBED
        if status in ("nonSubscribed", "unsubscribed"):
            return cls.NOT_SUBSCRIBED
        return cls.UNKNOWN


class ConsentChannel(StrEnum):
    """Channels a contact can consent to."""

    EMAIL = "email"
    SMS = "sms"


class SyncAction(StrEnum):
    """Direction of an enrollment or membership change."""

    ADD = "add"
    REMOVE = "remove"


class FormField(StrEnum):
    """Names of the fields submitted by the learner-facing forms."""

    EMAIL = "email_address"
    PHONE = "llms_phone"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    ADDRESS_1 = "llms_billing_address_1"
    ADDRESS_2 = "llms_billing_address_2"
    CITY = "llms_billing_city"
    STATE = "llms_billing_state"
    ZIP = "llms_billing_zip"
    COUNTRY = "llms_billing_country"
    EMAIL_CONSENT = "llmsconsentEmail"
    PHONE_CONSENT = "llmsconsentPhone"


class SubmissionMarker(StrEnum):
    """Nonces proving the request body is the original form submission."""

    CHECKOUT = "_llms_checkout_nonce"
    REGISTER = "_llms_register_person_nonce"
    UPDATE = "_llms_update_person_nonce"
