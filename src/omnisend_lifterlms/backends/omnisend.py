"""Omnisend marketing automation integration."""

import logging
from datetime import UTC, datetime

import requests

from omnisend_lifterlms.backends import (
    ConsentState,
    ContactRecord,
    EnrollmentEvent,
    MembershipEvent,
)
from omnisend_lifterlms.enums import ConsentChannel, ConsentStatus, SyncAction
from omnisend_lifterlms.exceptions import MissingIdentityError, OmnisendRequestError

from .base import BaseBackend

logger = logging.getLogger(__name__)

# ContactRecord field -> Omnisend contact attribute
CONTACT_ATTRIBUTES = {
    "first_name": "firstName",
    "last_name": "lastName",
    "city": "city",
    "state": "state",
    "zip": "postalCode",
    "country": "countryCode",
}

ENROLLMENT_VALUES = {SyncAction.ADD: "enrolled", SyncAction.REMOVE: "unenrolled"}
MEMBERSHIP_VALUES = {SyncAction.ADD: "active", SyncAction.REMOVE: "removed"}


def _status_date():
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _channel(subscribed):
    return {
        "status": "subscribed" if subscribed else "nonSubscribed",
        "statusDate": _status_date(),
    }


class OmnisendBackend(BaseBackend):
    """
    Omnisend marketing automation integration.

    Handles:
    - Contact creation and partial updates
    - Email and SMS consent
    - Course enrollments and memberships, stored as contact custom properties
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.omnisend.com/v3",
        source: str = "lifterlms",
        timeout: int = 10,
    ):
        """Configure the Omnisend backend."""
        self._api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.source = source
        self.timeout = timeout

    def _request(self, method, params=None, json=None, timeout=None):
        """Call the contacts endpoint and return the decoded response."""
        try:
            response = requests.request(
                method,
                f"{self.api_url}/contacts",
                params=params,
                json=json,
                headers={"X-API-KEY": self._api_key},
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as err:
            raise OmnisendRequestError(f"Omnisend {method} contacts request failed") from err

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            logger.warning("Omnisend %s contacts returned a non JSON body", method)
            return {}

    def _patch_contact(self, email, payload, timeout=None):
        if not email:
            raise MissingIdentityError("An email is required to update an Omnisend contact")
        return self._request("PATCH", params={"email": email}, json=payload, timeout=timeout)

    def _contact_payload(self, contact: ContactRecord, partial: bool) -> dict:
        """
        Build the Omnisend contact from the submitted fields.

        On a partial update, channels are only sent when the matching
        consent checkbox was submitted.
        """
        identifiers = []
        if not partial or contact.email_consent is not None:
            identifiers.append(
                {
                    "type": "email",
                    "id": contact.email,
                    "channels": {"email": _channel(bool(contact.email_consent))},
                }
            )
        if contact.phone:
            identifier = {"type": "phone", "id": contact.phone}
            if not partial or contact.phone_consent is not None:
                identifier["channels"] = {"sms": _channel(bool(contact.phone_consent))}
            identifiers.append(identifier)

        payload = {}
        if identifiers:
            payload["identifiers"] = identifiers

        fields = contact.present_fields()
        for name, attribute in CONTACT_ATTRIBUTES.items():
            if name in fields:
                payload[attribute] = fields[name]
        # Omnisend stores both lines in one attribute: a partial update only
        # sends it when both lines were submitted
        submitted_lines = [name in fields for name in ("address_1", "address_2")]
        if all(submitted_lines) or (not partial and any(submitted_lines)):
            lines = [fields.get("address_1"), fields.get("address_2")]
            payload["address"] = ", ".join(line for line in lines if line)
        return payload

    def get_contact_consent(self, email: str, timeout: int = None) -> ConsentState:
        """Read the consent of the contact from its email and phone identifiers."""
        if not email:
            raise MissingIdentityError("An email is required to read an Omnisend contact")

        data = self._request("GET", params={"email": email}, timeout=timeout)
        contacts = data.get("contacts") or []
        if not contacts:
            return ConsentState.unknown()

        email_status = sms_status = None
        for identifier in contacts[0].get("identifiers", []):
            channels = identifier.get("channels") or {}
            if identifier.get("type") == "email":
                email_status = (channels.get("email") or {}).get("status")
            elif identifier.get("type") == "phone":
                sms_status = (channels.get("sms") or {}).get("status")

        return ConsentState(
            email=ConsentStatus.from_omnisend(email_status),
            sms=ConsentStatus.from_omnisend(sms_status),
        )

    def create_contact(self, contact: ContactRecord, timeout: int = None) -> dict:
        """
        Create an Omnisend contact.

        Args:
            contact: Submitted contact fields
            timeout: API request timeout in seconds

        Returns:
            dict: Omnisend API response

        Raises:
            MissingIdentityError: If the contact has no email
            OmnisendRequestError: If contact creation fails

        """
        if not contact.email:
            raise MissingIdentityError("An email is required to create an Omnisend contact")

        payload = self._contact_payload(contact, partial=False)
        payload["tags"] = [self.source]
        return self._request("POST", json=payload, timeout=timeout)

    def update_contact(self, contact: ContactRecord, timeout: int = None) -> dict:
        """Update the submitted fields of an Omnisend contact."""
        return self._patch_contact(contact.email, self._contact_payload(contact, partial=True), timeout)

    def update_enrollment(self, event: EnrollmentEvent, timeout: int = None) -> dict:
        """Store the course enrollment as a custom property of the contact."""
        payload = {
            "customProperties": {
                f"lifterlms_course_{event.course_id}": ENROLLMENT_VALUES[event.action],
            }
        }
        return self._patch_contact(event.email, payload, timeout)

    def update_membership(self, event: MembershipEvent, timeout: int = None) -> dict:
        """Store the membership as a custom property of the contact."""
        payload = {
            "customProperties": {
                f"lifterlms_membership_{event.membership_id}": MEMBERSHIP_VALUES[event.action],
            }
        }
        return self._patch_contact(event.email, payload, timeout)

    def update_consent(
        self,
        flags: dict[ConsentChannel, bool],
        email: str,
        phone: str | None = None,
        timeout: int = None,
    ) -> dict:
        """Subscribe the contact to the flagged channels."""
        identifiers = []
        if flags.get(ConsentChannel.EMAIL):
            identifiers.append({"type": "email", "id": email, "channels": {"email": _channel(True)}})
        if flags.get(ConsentChannel.SMS) and phone:
            identifiers.append({"type": "phone", "id": phone, "channels": {"sms": _channel(True)}})

        if not identifiers:
            logger.info("No consent to update for %s", email)
            return {}
        return self._patch_contact(email, {"identifiers": identifiers}, timeout)
