"""
Credential store operations: registration, login and password reset.
"""

import logging

from django.contrib import auth
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from .exceptions import InvalidCredentials, InvalidOrExpiredToken, UpstreamDeliveryFailure
from .models import Account, Role, hash_reset_token

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = 'A user with that email already exists.'


def register(email, password):
    """
    Create an account with the 'user' role.

    Args:
        email: Email address (normalized to lowercase)
        password: Raw password, hashed before storage

    Returns:
        Account

    Raises:
        ValidationError: If the email is already registered, including a
            concurrent registration caught by the unique index
    """
    email = email.lower().strip()

    if Account.objects.filter(email__iexact=email).exists():
        raise ValidationError({'email': [DUPLICATE_EMAIL_MESSAGE]})

    try:
        with transaction.atomic():
            account = Account.objects.create_user(email=email, password=password, role=Role.USER)
    except IntegrityError:
        logger.warning(f"Concurrent registration for an existing email. Email: {email}")
        raise ValidationError({'email': [DUPLICATE_EMAIL_MESSAGE]})

    logger.info(f"Account registered. Email: {email}, ID: {account.id}")
    return account


def authenticate(request, email, password):
    """
    Check credentials.

    Args:
        request: HTTP request (passed to the auth backends)
        email: Email address
        password: Raw password

    Returns:
        Account

    Raises:
        InvalidCredentials: Unknown email, wrong password or disabled account
    """
    account = auth.authenticate(request, email=email, password=password)

    if account is None:
        raise InvalidCredentials()

    return account


class PasswordResetService:
    """
    Issues and consumes password reset tokens.

    Only the SHA-256 hash of a token is stored; the raw token travels in the
    emailed link ``<frontend>/resetpassword/<token>``.

    Args:
        config: MarketplaceConfig
        dispatcher: NotificationDispatcher
    """

    def __init__(self, config, dispatcher):
        self.config = config
        self.dispatcher = dispatcher

    def reset_url(self, raw_token):
        return f'{self.config.frontend_url}/resetpassword/{raw_token}'

    def request_reset(self, email):
        """
        Email a reset link to the account owning ``email``.

        Unknown emails are ignored silently so the endpoint cannot be used to
        discover accounts.

        Raises:
            UpstreamDeliveryFailure: If the email could not be sent; the issued
                token is cleared first
        """
        email = (email or '').lower().strip()

        try:
            account = Account.objects.get(email__iexact=email)
        except Account.DoesNotExist:
            logger.info("Password reset requested for an unknown email")
            return

        raw_token = account.issue_reset_token(self.config.reset_token_lifetime)
        account.save(update_fields=['reset_password_token', 'reset_password_expire', 'updated_at'])

        try:
            self.dispatcher.dispatch(
                self.dispatcher.password_reset(account, self.reset_url(raw_token))
            )
        except UpstreamDeliveryFailure:
            account.clear_reset_token()
            account.save(update_fields=['reset_password_token', 'reset_password_expire', 'updated_at'])
            logger.error(f"Reset token cleared after delivery failure. Account ID: {account.id}")
            raise

        logger.info(f"Password reset email sent. Account ID: {account.id}")

    def reset_password(self, raw_token, new_password):
        """
        Consume a reset token and set a new password.

        Args:
            raw_token: Token from the emailed link
            new_password: Raw new password

        Returns:
            Account

        Raises:
            InvalidOrExpiredToken: No account holds this token, or it expired
        """
        token_hash = hash_reset_token(raw_token or '')

        with transaction.atomic():
            account = (
                Account.objects.select_for_update()
                .filter(
                    reset_password_token=token_hash,
                    reset_password_expire__gt=timezone.now(),
                )
                .first()
            )

            if account is None:
                logger.warning("Password reset attempted with an invalid or expired token")
                raise InvalidOrExpiredToken()

            account.set_password(new_password)
            account.clear_reset_token()
            account.save()

        logger.info(f"Password reset completed. Account ID: {account.id}")
        return account
