"""Request context handed to the consent sync handlers."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from django.utils.html import strip_tags

from omnisend_lifterlms.enums import CONSENT_CHECKED, SubmissionMarker
from omnisend_lifterlms.tools.email import sanitize_email

_CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(value) -> str:
    """Strip tags, control characters and extra whitespace from a submitted value."""
    if value is None:
        return ""
    value = strip_tags(str(value))
    value = _CONTROL_CHARACTERS.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def is_checked(value) -> bool:
    """Return whether a submitted checkbox value is the checked sentinel."""
    if value is None:
        return False
    return str(value).strip() == CONSENT_CHECKED


@dataclass(frozen=True)
class RequestContext:
    """Submitted form fields and identity of the visitor for one request."""

    data: Mapping[str, str] = field(default_factory=dict)
    visitor_email: str | None = None
    # Syncs already sent for this request
    handled: set[str] = field(default_factory=set, compare=False, repr=False)

    @classmethod
    def from_request(cls, request):
        """Build the context of a Django request."""
        user = getattr(request, "user", None)
        visitor_email = None
        if user is not None and user.is_authenticated:
            visitor_email = getattr(user, "email", None) or None
        return cls(data=request.POST.dict(), visitor_email=visitor_email)

    def has_field(self, name) -> bool:
        """Return whether the field was submitted."""
        return name in self.data

    def text(self, name) -> str | None:
        """Return the sanitized text of a submitted field, None when not submitted."""
        if name not in self.data:
            return None
        return sanitize_text(self.data[name])

    def email(self, name) -> str | None:
        """Return the sanitized email of a submitted field, None when not submitted."""
        if name not in self.data:
            return None
        return sanitize_email(str(self.data[name]))

    def checked(self, name) -> bool:
        """Return whether the checkbox was submitted ticked."""
        return is_checked(self.data.get(name))

    def has_marker(self, *markers: SubmissionMarker) -> bool:
        """Return whether any of the submission markers is present."""
        return any(marker in self.data for marker in markers)

    def mark_handled(self, sync) -> bool:
        """Record that a sync ran for this request, return False when it already had."""
        if sync in self.handled:
            return False
        self.handled.add(sync)
        return True
