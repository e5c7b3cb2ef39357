"""Omnisend integration for LifterLMS lifecycle events."""

from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.functional import LazyObject, empty

from .handler import OmnisendHandler


class DefaultOmnisend(LazyObject):
    """Backend configured in settings, built on first use."""

    def _setup(self):
        """Configure the Omnisend backend."""
        self._wrapped = omnisend_handler()

    def _reset(self):
        """Forget the configured backend."""
        self._wrapped = empty


omnisend_handler = OmnisendHandler()
omnisend = DefaultOmnisend()


@receiver(setting_changed)
def reset_omnisend(*, setting, **kwargs):
    """Rebuild the backend after OMNISEND_LIFTERLMS changes."""
    if setting == "OMNISEND_LIFTERLMS":
        omnisend_handler.reset()
        omnisend._reset()
