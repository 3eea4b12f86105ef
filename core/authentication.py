"""
Bearer token authentication for the marketplace API.
"""

import logging

from rest_framework.exceptions import AuthenticationFailed, NotFound
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.settings import api_settings

from . import tokens

logger = logging.getLogger(__name__)


class BearerTokenAuthentication(JWTAuthentication):
    """
    Reads ``Authorization: Bearer <token>`` and resolves the account.

    - No header: request stays anonymous (IsAuthenticated answers 401)
    - Expired / malformed / unverifiable token: 401 with a distinct message
    - Account deleted since the token was issued: 404
    - Account deactivated: 401
    """

    def get_validated_token(self, raw_token):
        """Return the verified claims of the raw token."""
        return tokens.decode_token(raw_token)

    def get_user(self, validated_token):
        """
        Load the account referenced by the token claims.

        Args:
            validated_token: Claims returned by get_validated_token

        Returns:
            Account

        Raises:
            NotFound: If the account no longer exists
            AuthenticationFailed: If the account is deactivated
        """
        account_id = validated_token[api_settings.USER_ID_CLAIM]

        try:
            account = self.user_model.objects.get(
                **{api_settings.USER_ID_FIELD: account_id}
            )
        except (self.user_model.DoesNotExist, ValueError):
            logger.warning(f"Valid token for missing account. Account ID: {account_id}")
            raise NotFound('User associated with this token was not found')

        if not account.is_active:
            logger.warning(f"Token used by disabled account. Account ID: {account_id}")
            raise AuthenticationFailed(
                'Not authorized, account disabled',
                code='user_inactive'
            )

        return account
