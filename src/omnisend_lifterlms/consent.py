"""Sync LifterLMS lifecycle events and consent to Omnisend."""

import functools
import logging

from django.contrib.auth import get_user_model
from django.utils.html import format_html
from django.utils.translation import gettext as _

from omnisend_lifterlms import omnisend, signals
from omnisend_lifterlms.backends import (
    ConsentState,
    ContactRecord,
    EnrollmentEvent,
    MembershipEvent,
    OrderConsentUpdate,
)
from omnisend_lifterlms.enums import (
    CHECKOUT_LOCATION,
    CONSENT_CHECKED,
    ConsentChannel,
    ConsentStatus,
    FormField,
    SubmissionMarker,
    SyncAction,
)
from omnisend_lifterlms.exceptions import MissingIdentityError, MissingSubmissionMarkerError
from omnisend_lifterlms.handler import consent_filter_enabled
from omnisend_lifterlms.request import RequestContext

logger = logging.getLogger(__name__)

CHECKBOX_TEMPLATE = (
    '<div class="llms-form-field type-checkbox llms-cols-12 llms-cols-last">'
    '<label for="{name}">{label}</label>'
    '<input id="{name}" name="{name}" {checked}type="checkbox" class="input" value="{value}">'
    "</div>"
)

# ContactRecord field -> submitted form field
CONTACT_TEXT_FIELDS = {
    "phone": FormField.PHONE,
    "first_name": FormField.FIRST_NAME,
    "last_name": FormField.LAST_NAME,
    "address_1": FormField.ADDRESS_1,
    "address_2": FormField.ADDRESS_2,
    "city": FormField.CITY,
    "state": FormField.STATE,
    "zip": FormField.ZIP,
    "country": FormField.COUNTRY,
}


def get_user_email(user_id):
    """Return the email of a user, None when the user does not exist."""
    return get_user_model().objects.filter(pk=user_id).values_list("email", flat=True).first()


def best_effort(method):
    """Turn a missing identity or submission marker into a logged no-op."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (MissingIdentityError, MissingSubmissionMarkerError) as err:
            logger.info("Skipping Omnisend sync in %s: %s", method.__name__, err)
            return None

    return wrapper


def render_checkbox(name, label, status):
    """Render a consent checkbox, ticked when the channel is subscribed."""
    return format_html(
        CHECKBOX_TEMPLATE,
        name=name,
        label=label,
        checked="checked " if status == ConsentStatus.SUBSCRIBED else "",
        value=CONSENT_CHECKED,
    )


class ConsentSyncHandler:
    """
    Forward LifterLMS lifecycle events to Omnisend.

    Every sync is best effort: a missing email or submission marker skips the
    remote call, and remote failures never reach the learner except on the
    form renderer, where consent falls back to unknown.
    """

    # signal, handler method, signal kwargs passed to the method
    RECEIVERS = (
        (signals.user_registered, "on_user_registered", ("user_id", "context")),
        (signals.user_account_updated, "on_user_profile_updated", ("user_id", "context")),
        (signals.user_enrolled_in_course, "on_enrolled", ("user_id", "course_id")),
        (signals.user_removed_from_course, "on_unenrolled", ("user_id", "course_id")),
        (signals.user_added_to_membership, "on_membership_added", ("user_id", "membership_id")),
        (signals.user_removed_from_membership, "on_membership_removed", ("user_id", "membership_id")),
        (signals.new_pending_order, "on_order_created", ("order", "context")),
    )

    def __init__(self, backend=None, email_resolver=None, consent_filter=None):
        """Initialize the handler, reading the consent filter option once."""
        self.backend = backend if backend is not None else omnisend
        self.email_resolver = email_resolver or get_user_email
        self.consent_filter_enabled = consent_filter_enabled() if consent_filter is None else consent_filter

    def _dispatch_uid(self, method_name):
        return f"omnisend_lifterlms.{method_name}.{id(self)}"

    def _receiver(self, method_name, arg_names):
        method = getattr(self, method_name)

        def receiver(sender, **kwargs):
            return method(*(kwargs.get(name) for name in arg_names))

        return receiver

    def connect(self):
        """Register the handler on the lifecycle signals and the form renderer."""
        if self.consent_filter_enabled:
            signals.form_html.connect(self.render_consent_fields)
        for signal, method_name, arg_names in self.RECEIVERS:
            signal.connect(
                self._receiver(method_name, arg_names),
                weak=False,
                dispatch_uid=self._dispatch_uid(method_name),
            )

    def disconnect(self):
        """Unregister everything connect registered."""
        signals.form_html.disconnect(self.render_consent_fields)
        for signal, method_name, _arg_names in self.RECEIVERS:
            signal.disconnect(dispatch_uid=self._dispatch_uid(method_name))

    def _resolve_email(self, user_id):
        email = self.email_resolver(user_id) if user_id is not None else None
        if not email:
            raise MissingIdentityError(f"No email for user {user_id!r}")
        return email

    def get_consent_state(self, context):
        """Read the visitor consent, unknown when it cannot be read."""
        email = context.visitor_email if context is not None else None
        if not email:
            return ConsentState.unknown()
        try:
            return self.backend.get_contact_consent(email)
        except Exception:  # noqa: BLE001
            logger.warning("Could not read Omnisend consent, rendering unchecked fields", exc_info=True)
            return ConsentState.unknown()

    def render_consent_fields(self, html, location, context=None):
        """
        Append the email and SMS consent checkboxes to a form.

        Checkboxes are ticked when the visitor is already subscribed. On the
        checkout form a subscribed channel is not asked again.
        """
        state = self.get_consent_state(context)
        email_block = render_checkbox(FormField.EMAIL_CONSENT, _("Subscribe me to your mailing lists"), state.email)
        sms_block = render_checkbox(FormField.PHONE_CONSENT, _("Subscribe me to your SMS lists"), state.sms)
        blocks = ((state.email, email_block), (state.sms, sms_block))
        for status, block in blocks:
            if location == CHECKOUT_LOCATION and status == ConsentStatus.SUBSCRIBED:
                continue
            html += block
        return html

    def build_contact(self, context):
        """Map the submitted form fields to a contact."""
        email = context.email(FormField.EMAIL)
        if not email:
            raise MissingIdentityError("The form did not submit a valid email")

        contact = ContactRecord(email=email)
        for attribute, form_field in CONTACT_TEXT_FIELDS.items():
            setattr(contact, attribute, context.text(form_field))
        if context.has_field(FormField.EMAIL_CONSENT):
            contact.email_consent = context.checked(FormField.EMAIL_CONSENT)
        if context.has_field(FormField.PHONE_CONSENT):
            contact.phone_consent = context.checked(FormField.PHONE_CONSENT)
        return contact

    @best_effort
    def on_user_registered(self, user_id, context=None):
        """Create the Omnisend contact of a learner registered from a form."""
        context = context or RequestContext()
        if user_id is None:
            raise MissingIdentityError("No user id")
        if not context.has_marker(SubmissionMarker.CHECKOUT, SubmissionMarker.REGISTER):
            raise MissingSubmissionMarkerError("Registration was not submitted from a form")
        contact = self.build_contact(context)
        if not context.mark_handled("create_contact"):
            logger.info("Contact of user %s already created for this request", user_id)
            return None
        return self.backend.create_contact(contact)

    @best_effort
    def on_user_profile_updated(self, user_id, context=None):
        """Update the Omnisend contact of a learner editing their account."""
        context = context or RequestContext()
        if user_id is None:
            raise MissingIdentityError("No user id")
        if not context.has_marker(SubmissionMarker.UPDATE):
            raise MissingSubmissionMarkerError("Account update was not submitted from a form")
        contact = self.build_contact(context)
        if not context.mark_handled("update_contact"):
            logger.info("Contact of user %s already updated for this request", user_id)
            return None
        return self.backend.update_contact(contact)

    def _sync_enrollment(self, user_id, course_id, action):
        email = self._resolve_email(user_id)
        if course_id is None:
            logger.info("Skipping enrollment sync of user %s without a course", user_id)
            return None
        return self.backend.update_enrollment(EnrollmentEvent(email=email, course_id=course_id, action=action))

    def _sync_membership(self, user_id, membership_id, action):
        email = self._resolve_email(user_id)
        if membership_id is None:
            logger.info("Skipping membership sync of user %s without a membership", user_id)
            return None
        return self.backend.update_membership(
            MembershipEvent(email=email, membership_id=membership_id, action=action)
        )

    @best_effort
    def on_enrolled(self, user_id, course_id):
        """Record a course enrollment."""
        return self._sync_enrollment(user_id, course_id, SyncAction.ADD)

    @best_effort
    def on_unenrolled(self, user_id, course_id):
        """Record a course removal."""
        return self._sync_enrollment(user_id, course_id, SyncAction.REMOVE)

    @best_effort
    def on_membership_added(self, user_id, membership_id):
        """Record a membership."""
        return self._sync_membership(user_id, membership_id, SyncAction.ADD)

    @best_effort
    def on_membership_removed(self, user_id, membership_id):
        """Record a membership removal."""
        return self._sync_membership(user_id, membership_id, SyncAction.REMOVE)

    def build_order_consent(self, order, context):
        """
        Collect the consent given on a pending order.

        With the consent filter disabled, the order subscribes both channels
        without looking at the request.
        """
        email = getattr(order, "billing_email", None)
        if not email:
            raise MissingIdentityError("The order has no billing email")

        update = OrderConsentUpdate(email=email)
        bypass = not self.consent_filter_enabled
        if bypass or context.checked(FormField.PHONE_CONSENT):
            update.flags[ConsentChannel.SMS] = True
            update.phone = getattr(order, "billing_phone", None) or None
        if bypass or context.checked(FormField.EMAIL_CONSENT):
            update.flags[ConsentChannel.EMAIL] = True
        return update

    @best_effort
    def on_order_created(self, order, context=None):
        """Forward the consent given while checking out."""
        context = context or RequestContext()
        if order is None:
            raise MissingIdentityError("No order")

        if self.consent_filter_enabled:
            if order_total(order) <= 0:
                logger.info("Skipping consent sync of a free order")
                return None
            if not context.has_marker(SubmissionMarker.CHECKOUT):
                raise MissingSubmissionMarkerError("Order was not submitted from the checkout form")

        update = self.build_order_consent(order, context)
        return self.backend.update_consent(update.flags, update.email, phone=update.phone)


def order_total(order) -> float:
    """Return the order total as a float, 0 when it is missing or malformed."""
    try:
        return float(getattr(order, "total", 0) or 0)
    except (TypeError, ValueError):
        return 0.0
