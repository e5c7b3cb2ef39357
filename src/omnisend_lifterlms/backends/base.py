"""Omnisend backend base module."""

from abc import ABC, abstractmethod

from omnisend_lifterlms.backends import (
    ConsentState,
    ContactRecord,
    EnrollmentEvent,
    MembershipEvent,
)
from omnisend_lifterlms.enums import ConsentChannel


class BaseBackend(ABC):
    """Base class for all Omnisend backends."""

    @abstractmethod
    def get_contact_consent(self, email: str, timeout: int = None) -> ConsentState:
        """
        Read the current consent of a contact.

        Args:
            email: Email address of the contact
            timeout: API request timeout in seconds

        Returns:
            ConsentState: email and SMS consent of the contact

        Raises:
            OmnisendRequestError: If the API call fails

        """

    @abstractmethod
    def create_contact(self, contact: ContactRecord, timeout: int = None) -> dict:
        """
        Create a contact.

        Args:
            contact: Submitted contact fields
            timeout: API request timeout in seconds

        Returns:
            dict: Service response

        Raises:
            MissingIdentityError: If the contact has no email
            OmnisendRequestError: If the API call fails

        """

    @abstractmethod
    def update_contact(self, contact: ContactRecord, timeout: int = None) -> dict:
        """Update the submitted fields of an existing contact."""

    @abstractmethod
    def update_enrollment(self, event: EnrollmentEvent, timeout: int = None) -> dict:
        """Record a course enrollment change on the contact."""

    @abstractmethod
    def update_membership(self, event: MembershipEvent, timeout: int = None) -> dict:
        """Record a membership change on the contact."""

    @abstractmethod
    def update_consent(
        self,
        flags: dict[ConsentChannel, bool],
        email: str,
        phone: str | None = None,
        timeout: int = None,
    ) -> dict:
        """
        Subscribe a contact to the flagged channels.

        Args:
            flags: Channels the contact consented to
            email: Email address of the contact
            phone: Phone number to attach to the SMS channel
            timeout: API request timeout in seconds

        Returns:
            dict: Service response

        """
