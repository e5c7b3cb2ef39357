"""Dummy Omnisend backend."""

from omnisend_lifterlms.backends import ConsentState

from .base import BaseBackend


class DummyBackend(BaseBackend):
    """Dummy Omnisend backend doing nothing."""

    def get_contact_consent(self, email, timeout=None):
        """Report an unknown consent."""
        return ConsentState.unknown()

    def create_contact(self, contact, timeout=None):
        """Create a contact."""
        return {}

    def update_contact(self, contact, timeout=None):
        """Update a contact."""
        return {}

    def update_enrollment(self, event, timeout=None):
        """Update a course enrollment."""
        return {}

    def update_membership(self, event, timeout=None):
        """Update a membership."""
        return {}

    def update_consent(self, flags, email, phone=None, timeout=None):
        """Update a consent."""
        return {}
