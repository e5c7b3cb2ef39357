"""
LifterLMS lifecycle signals.

The LMS emits these signals, the consent sync handler receives them:
- user_registered: user_id, context
- user_account_updated: user_id, context
- user_enrolled_in_course: user_id, course_id
- user_removed_from_course: user_id, course_id
- user_added_to_membership: user_id, membership_id
- user_removed_from_membership: user_id, membership_id
- new_pending_order: order, context

form_html is a filter: each callable receives (html, location, context) and
returns the html to render.
"""

import logging
from bisect import insort

from django.dispatch import Signal

logger = logging.getLogger(__name__)

user_registered = Signal()
user_account_updated = Signal()
user_enrolled_in_course = Signal()
user_removed_from_course = Signal()
user_added_to_membership = Signal()
user_removed_from_membership = Signal()
new_pending_order = Signal()


def emit(signal, sender, **kwargs):
    """
    Send a lifecycle signal without letting a receiver abort the caller.

    Receiver failures are logged with their traceback and returned like
    Signal.send_robust does.
    """
    responses = signal.send_robust(sender, **kwargs)
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                "Receiver %r failed on %s",
                receiver,
                sender,
                exc_info=(type(response), response, response.__traceback__),
            )
    return responses


class FormHtmlFilter:
    """Ordered chain of callables rewriting the html of a learner-facing form."""

    def __init__(self):
        """Initialize an empty chain."""
        self._filters = []
        self._counter = 0

    def connect(self, func, priority=10):
        """Register a filter, lower priorities run first."""
        if self.is_connected(func):
            return
        self._counter += 1
        insort(self._filters, (priority, self._counter, func), key=lambda item: item[:2])

    def disconnect(self, func):
        """Unregister a filter, return whether it was registered."""
        before = len(self._filters)
        self._filters = [item for item in self._filters if item[2] != func]
        return len(self._filters) != before

    def is_connected(self, func):
        """Return whether the filter is registered."""
        return any(item[2] == func for item in self._filters)

    def apply(self, html, location, context=None):
        """Run the html through every filter and return the result."""
        for _priority, _order, func in self._filters:
            try:
                html = func(html, location, context)
            except Exception:
                logger.exception("Form html filter %r failed for location %s", func, location)
        return html


form_html = FormHtmlFilter()
