"""Test the consent sync of pending orders."""

import pytest

from omnisend_lifterlms.consent import ConsentSyncHandler, order_total
from omnisend_lifterlms.enums import ConsentChannel, FormField, SubmissionMarker
from omnisend_lifterlms.request import RequestContext
from tests.factories import OrderFactory

BOTH = {ConsentChannel.SMS: True, ConsentChannel.EMAIL: True}


@pytest.fixture(name="unfiltered_sync")
def fixture_unfiltered_sync(backend, emails):
    """Return a consent sync handler with the consent filter disabled."""
    return ConsentSyncHandler(backend=backend, email_resolver=emails.get, consent_filter=False)


def _checkout(**fields):
    return RequestContext(data={SubmissionMarker.CHECKOUT: "nonce", **fields})


@pytest.mark.parametrize("total", [0, "0.00", 49.0])
@pytest.mark.parametrize("context", [RequestContext(), _checkout()])
def test_order_without_consent_filter_always_subscribes(unfiltered_sync, backend, total, context):
    """Without the consent filter every order subscribes both channels."""
    order = OrderFactory(total=total, billing_email="buyer@example.com")

    unfiltered_sync.on_order_created(order, context)

    backend.update_consent.assert_called_once_with(BOTH, "buyer@example.com", phone="+33612345678")


def test_free_order_without_marker_is_skipped(consent_sync, backend):
    """A free order outside of the checkout is not synced."""
    consent_sync.on_order_created(OrderFactory(total=0), RequestContext())

    backend.update_consent.assert_not_called()


def test_free_order_from_checkout_is_skipped(consent_sync, backend):
    """A free order is not synced even when submitted from the checkout."""
    context = _checkout(**{FormField.EMAIL_CONSENT: "1"})

    consent_sync.on_order_created(OrderFactory(total=0), context)

    backend.update_consent.assert_not_called()


def test_paid_order_without_marker_is_skipped(consent_sync, backend):
    """A paid order not submitted from the checkout is not synced."""
    context = RequestContext(data={FormField.EMAIL_CONSENT: "1"})

    consent_sync.on_order_created(OrderFactory(), context)

    backend.update_consent.assert_not_called()


def test_paid_order_with_phone_consent_only(consent_sync, backend):
    """Only the checked channel is sent, with the billing phone."""
    order = OrderFactory(billing_email="buyer@example.com", billing_phone="+15550001111")

    consent_sync.on_order_created(order, _checkout(**{FormField.PHONE_CONSENT: "1"}))

    backend.update_consent.assert_called_once_with(
        {ConsentChannel.SMS: True}, "buyer@example.com", phone="+15550001111"
    )


@pytest.mark.parametrize("checked", ["1", 1, " 1 "])
def test_paid_order_with_email_consent_only(consent_sync, backend, checked):
    """The email flag is sent without the phone number."""
    order = OrderFactory(billing_email="buyer@example.com")

    consent_sync.on_order_created(order, _checkout(**{FormField.EMAIL_CONSENT: checked}))

    backend.update_consent.assert_called_once_with({ConsentChannel.EMAIL: True}, "buyer@example.com", phone=None)


@pytest.mark.parametrize("value", ["0", "", "on", "yes", "11"])
def test_paid_order_with_unchecked_consent(consent_sync, backend, value):
    """Only the checked sentinel counts as consent."""
    order = OrderFactory(billing_email="buyer@example.com")
    context = _checkout(**{FormField.EMAIL_CONSENT: value, FormField.PHONE_CONSENT: value})

    consent_sync.on_order_created(order, context)

    backend.update_consent.assert_called_once_with({}, "buyer@example.com", phone=None)


def test_order_without_billing_email_is_skipped(unfiltered_sync, backend):
    """An order without billing email is not synced."""
    unfiltered_sync.on_order_created(OrderFactory(billing_email=""), RequestContext())

    backend.update_consent.assert_not_called()


def test_missing_order_is_skipped(unfiltered_sync, backend):
    """A signal without order is not synced."""
    unfiltered_sync.on_order_created(None)

    backend.update_consent.assert_not_called()


def test_consent_filter_is_read_from_settings(settings, backend):
    """The consent filter defaults to the settings option, read at construction."""
    settings.OMNISEND_LIFTERLMS = {"CONSENT_FILTER_ENABLED": False}
    consent_sync = ConsentSyncHandler(backend=backend)
    settings.OMNISEND_LIFTERLMS = {"CONSENT_FILTER_ENABLED": True}

    assert consent_sync.consent_filter_enabled is False
    assert ConsentSyncHandler(backend=backend).consent_filter_enabled is True


@pytest.mark.parametrize(
    ("total", "expected"),
    [(10, 10.0), ("12.50", 12.5), (None, 0.0), ("", 0.0), ("free", 0.0)],
)
def test_order_total(total, expected):
    """Order totals are read as floats."""
    assert order_total(OrderFactory(total=total)) == expected
