"""Omnisend LifterLMS application."""

from django.apps import AppConfig

from omnisend_lifterlms.handler import get_omnisend_settings


class OmnisendLifterLMSConfig(AppConfig):
    """Configuration class connecting the consent sync to the lifecycle signals."""

    name = "omnisend_lifterlms"
    verbose_name = "Omnisend for LifterLMS"

    consent_sync = None

    def ready(self):
        """Connect the consent sync handler unless disabled in settings."""
        if not get_omnisend_settings().get("AUTO_CONNECT", True):
            return

        from omnisend_lifterlms.consent import ConsentSyncHandler  # noqa: PLC0415

        self.consent_sync = ConsentSyncHandler()
        self.consent_sync.connect()
