"""Omnisend backends module."""

from dataclasses import asdict, dataclass, field

from omnisend_lifterlms.enums import ConsentChannel, ConsentStatus, SyncAction


@dataclass
class ContactRecord:
    """
    Contact data sent to Omnisend.

    A field left to None was not submitted and must not overwrite the remote value.
    """

    email: str | None = None
    phone: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    address_1: str | None = None
    address_2: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None
    email_consent: bool | None = None
    phone_consent: bool | None = None

    def present_fields(self) -> dict:
        """Return the fields that were submitted."""
        return {name: value for name, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class ConsentState:
    """Consent status of the email and SMS channels of a contact."""

    email: ConsentStatus = ConsentStatus.UNKNOWN
    sms: ConsentStatus = ConsentStatus.UNKNOWN

    @classmethod
    def unknown(cls):
        """Return the state used when nothing is known about the contact."""
        return cls()


@dataclass(frozen=True)
class EnrollmentEvent:
    """A learner added to or removed from a course."""

    email: str
    course_id: int
    action: SyncAction = SyncAction.ADD


@dataclass(frozen=True)
class MembershipEvent:
    """A learner added to or removed from a membership."""

    email: str
    membership_id: int
    action: SyncAction = SyncAction.ADD


@dataclass
class OrderConsentUpdate:
    """Consent given while placing an order."""

    email: str
    flags: dict[ConsentChannel, bool] = field(default_factory=dict)
    phone: str | None = None
