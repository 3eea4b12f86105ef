"""
Email notifications.

Domain components build typed Notification messages; the dispatcher hands
them to Django's mail framework. Callers choose between a delivery that
raises (password reset, contact form) and a best-effort one that only logs
failures (welcome, booking and account status emails).
"""

import logging
from dataclasses import dataclass

from django.core.mail import send_mail

from .exceptions import UpstreamDeliveryFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A plain-text email to a single recipient."""

    recipient: str
    subject: str
    body: str


class NotificationDispatcher:
    """
    Sends notifications through the configured Django email backend.

    Args:
        config: MarketplaceConfig (sender address and site name)
    """

    def __init__(self, config):
        self.config = config

    def dispatch(self, notification):
        """
        Send one notification.

        Raises:
            UpstreamDeliveryFailure: If the email backend fails
        """
        try:
            send_mail(
                subject=notification.subject,
                message=notification.body,
                from_email=self.config.from_email,
                recipient_list=[notification.recipient],
                fail_silently=False,
            )
        except Exception as e:
            logger.error(
                f"Email delivery failed. Recipient: {notification.recipient}, "
                f"Subject: {notification.subject}, Error: {e}"
            )
            raise UpstreamDeliveryFailure() from e

        logger.info(
            f"Email sent. Recipient: {notification.recipient}, "
            f"Subject: {notification.subject}"
        )

    def dispatch_best_effort(self, notifications):
        """
        Send notifications, logging and swallowing delivery failures.

        Returns:
            int: Number of notifications delivered
        """
        delivered = 0
        for notification in notifications:
            try:
                self.dispatch(notification)
            except UpstreamDeliveryFailure:
                # Already logged by dispatch
                continue
            delivered += 1
        return delivered

    # Account messages

    def welcome(self, account):
        return Notification(
            recipient=account.email,
            subject=f'Welcome to {self.config.site_name}',
            body=(
                f'Hello,\n\n'
                f'Your account {account.email} has been created.\n'
                f'You can now browse vehicles, save favorites and book '
                f'reservations or test drives.\n\n'
                f'The {self.config.site_name} team'
            ),
        )

    def password_reset(self, account, reset_url):
        return Notification(
            recipient=account.email,
            subject='Password reset request',
            body=(
                f'Hello,\n\n'
                f'You requested a password reset. Open the link below to '
                f'choose a new password:\n\n'
                f'{reset_url}\n\n'
                f'This link expires in '
                f'{int(self.config.reset_token_lifetime.total_seconds() // 60)} minutes. '
                f'If you did not request it, ignore this email.\n\n'
                f'The {self.config.site_name} team'
            ),
        )

    def account_status(self, account):
        """Blocked / unblocked message, depending on account.is_active."""
        if account.is_active:
            subject = 'Your account has been reactivated'
            text = 'Your account has been reactivated. You can log in again.'
        else:
            subject = 'Your account has been blocked'
            text = 'Your account has been blocked by an administrator.'

        return Notification(
            recipient=account.email,
            subject=subject,
            body=f'Hello,\n\n{text}\n\nThe {self.config.site_name} team',
        )

    def account_deleted(self, email):
        return Notification(
            recipient=email,
            subject='Your account has been deleted',
            body=(
                f'Hello,\n\n'
                f'Your account {email} has been deleted by an administrator.\n\n'
                f'The {self.config.site_name} team'
            ),
        )

    def contact(self, name, email, subject, message):
        return Notification(
            recipient=self.config.operator_email,
            subject=f'Contact form: {subject}',
            body=(
                f'New message from the contact form.\n\n'
                f'Name: {name}\n'
                f'Email: {email}\n'
                f'Subject: {subject}\n\n'
                f'{message}'
            ),
        )
