"""Fixtures for the test suite."""

from unittest import mock

import pytest

from omnisend_lifterlms.backends import ConsentState
from omnisend_lifterlms.backends.base import BaseBackend
from omnisend_lifterlms.consent import ConsentSyncHandler
from omnisend_lifterlms.enums import FormField, SubmissionMarker
from omnisend_lifterlms.request import RequestContext


@pytest.fixture(name="backend")
def fixture_backend():
    """Return a fake Omnisend backend recording its calls."""
    backend = mock.create_autospec(BaseBackend, instance=True)
    backend.get_contact_consent.return_value = ConsentState.unknown()
    return backend


@pytest.fixture(name="emails")
def fixture_emails():
    """Map user ids to emails for the fake identity store."""
    return {1: "learner@example.com"}


@pytest.fixture(name="consent_sync")
def fixture_consent_sync(backend, emails):
    """Return a consent sync handler with the consent filter enabled."""
    return ConsentSyncHandler(backend=backend, email_resolver=emails.get, consent_filter=True)


@pytest.fixture(name="form_data")
def fixture_form_data():
    """Return a complete registration form submission."""
    return {
        FormField.EMAIL: "learner@example.com",
        FormField.PHONE: "+33612345678",
        FormField.FIRST_NAME: "Ada",
        FormField.LAST_NAME: "Lovelace",
        FormField.ADDRESS_1: "12 rue de la Paix",
        FormField.ADDRESS_2: "Apt 4",
        FormField.CITY: "Paris",
        FormField.STATE: "IDF",
        FormField.ZIP: "75002",
        FormField.COUNTRY: "FR",
    }


@pytest.fixture(name="checkout_context")
def fixture_checkout_context(form_data):
    """Return the context of a checkout form submission."""
    return RequestContext(data={**form_data, SubmissionMarker.CHECKOUT: "abc123"})
