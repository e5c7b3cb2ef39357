"""Omnisend backend handler."""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from omnisend_lifterlms.backends.base import BaseBackend
from omnisend_lifterlms.exceptions import OmnisendInvalidBackendError

logger = logging.getLogger(__name__)


def get_omnisend_settings() -> dict:
    """Return the OMNISEND_LIFTERLMS settings, an empty dict when unset."""
    return getattr(settings, "OMNISEND_LIFTERLMS", None) or {}


def consent_filter_enabled() -> bool:
    """Return whether the consent filter option is switched on."""
    return bool(get_omnisend_settings().get("CONSENT_FILTER_ENABLED", False))


class OmnisendHandler:
    """
    Build the Omnisend backend once per configuration.

    The definition is either given explicitly or read from the BACKEND and
    PARAMETERS keys of settings.OMNISEND_LIFTERLMS, the other keys of that
    setting belong to the consent sync.
    """

    def __init__(self, backend=None):
        """Initialize the Omnisend handler."""
        self._definition = backend
        self._omnisend = None

    @property
    def backend(self) -> dict:
        """Return the backend definition."""
        if self._definition is not None:
            return self._definition
        definition = get_omnisend_settings()
        if "BACKEND" not in definition:
            raise ImproperlyConfigured("settings.OMNISEND_LIFTERLMS['BACKEND'] is not configured")
        return definition

    def __call__(self):
        """Create if not existing the backend and then return it."""
        if self._omnisend is None:
            self._omnisend = self.create_backend(self.backend)
        return self._omnisend

    def reset(self):
        """Drop the backend so the next call builds it from the current settings."""
        self._omnisend = None

    def create_backend(self, definition):
        """Instantiate and configure the Omnisend backend."""
        path = definition["BACKEND"]
        try:
            klass = import_string(path)
        except ImportError as e:
            raise OmnisendInvalidBackendError(f"Could not find backend {path!r}: {e}") from e
        if not isinstance(klass, type) or not issubclass(klass, BaseBackend):
            raise OmnisendInvalidBackendError(f"{path!r} is not an Omnisend backend")

        logger.debug("Using Omnisend backend %s", path)
        return klass(**definition.get("PARAMETERS", {}))
