"""
Process-wide marketplace configuration.

Components receive a MarketplaceConfig in their constructor instead of
reading Django settings on their own.
"""

from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings as django_settings


@dataclass(frozen=True)
class MarketplaceConfig:
    """Immutable configuration shared by the domain components."""

    frontend_url: str
    operator_email: str
    from_email: str
    media_base_url: str
    placeholder_image_url: str
    reset_token_lifetime: timedelta = timedelta(minutes=10)
    site_name: str = 'Vehicle Marketplace'

    @classmethod
    def from_settings(cls, settings=None):
        """
        Build the configuration from the MARKETPLACE settings dict.

        Args:
            settings: Settings object (defaults to django.conf.settings)

        Returns:
            MarketplaceConfig
        """
        settings = settings or django_settings
        values = settings.MARKETPLACE

        return cls(
            frontend_url=values['FRONTEND_URL'].rstrip('/'),
            operator_email=values['OPERATOR_EMAIL'],
            from_email=settings.DEFAULT_FROM_EMAIL,
            media_base_url=values.get('MEDIA_BASE_URL', '').rstrip('/'),
            placeholder_image_url=values['PLACEHOLDER_IMAGE_URL'],
            reset_token_lifetime=timedelta(
                minutes=values.get('RESET_TOKEN_LIFETIME_MINUTES', 10)
            ),
            site_name=values.get('SITE_NAME', 'Vehicle Marketplace'),
        )
