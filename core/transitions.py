"""
Status lifecycle of reservations and test drives.

    pending   -> confirmed, cancelled, completed
    confirmed -> cancelled, completed
    cancelled, completed: terminal

There is no way back to pending. Requesting the current status is a no-op.
"""

import logging
from dataclasses import dataclass, field

from .exceptions import Forbidden, InvalidState
from .models import BookingStatus
from .notifications import Notification
from .permissions import can_cancel_booking

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
    }),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


def is_allowed(old_status, new_status):
    return new_status in ALLOWED_TRANSITIONS.get(old_status, frozenset())


@dataclass
class TransitionResult:
    """Outcome of a transition request."""

    changed: bool
    old_status: str
    new_status: str
    notifications: list = field(default_factory=list)


class StatusTransitionEngine:
    """
    Applies status changes to bookings and notifies the parties.

    transition() persists the new status and returns the account and operator
    messages; notify() sends them best-effort once the caller has committed,
    so a delivery failure never rolls back a status change and no email
    announces a status that was not stored.

    Args:
        dispatcher: NotificationDispatcher
        config: MarketplaceConfig
    """

    CREATED = 'created'
    STATUS_CHANGED = 'status_changed'

    def __init__(self, dispatcher, config):
        self.dispatcher = dispatcher
        self.config = config

    def transition(self, booking, new_status, actor):
        """
        Move a booking to a new status.

        Args:
            booking: Reservation or TestDrive (locked by the caller)
            new_status: Target BookingStatus value
            actor: Account performing the change

        Returns:
            TransitionResult

        Raises:
            InvalidState: If the transition is not allowed
        """
        old_status = booking.status
        new_status = BookingStatus(new_status)

        if old_status == new_status:
            return TransitionResult(changed=False, old_status=old_status, new_status=new_status)

        if not is_allowed(old_status, new_status):
            logger.warning(
                f"Rejected {booking.kind_label} transition. "
                f"ID: {booking.pk}, From: {old_status}, To: {new_status}, "
                f"Actor: {actor.email} (ID: {actor.id})"
            )
            raise InvalidState(
                f'Cannot change {booking.kind_label} status from '
                f'"{old_status}" to "{new_status}".'
            )

        booking.status = new_status
        booking.save(update_fields=['status', 'updated_at'])

        logger.info(
            f"{booking.kind_label.capitalize()} status updated. "
            f"ID: {booking.pk}, Old Status: {old_status}, New Status: {new_status}, "
            f"Actor: {actor.email} (ID: {actor.id})"
        )

        notifications = self.build_notifications(booking, self.STATUS_CHANGED, actor)

        return TransitionResult(
            changed=True,
            old_status=old_status,
            new_status=new_status,
            notifications=notifications,
        )

    def notify(self, result):
        """
        Send the messages of a transition, best-effort.

        Call after the transaction holding the status change has committed.

        Returns:
            int: Number of messages delivered
        """
        return self.dispatcher.dispatch_best_effort(result.notifications)

    def cancel(self, booking, actor):
        """
        Cancel a booking on behalf of its creator or an admin.

        Raises:
            Forbidden: If the actor is neither the creator nor an admin
            InvalidState: If the booking is already cancelled or completed
        """
        if not can_cancel_booking(actor, booking):
            logger.warning(
                f"Unauthorized {booking.kind_label} cancel attempt. "
                f"ID: {booking.pk}, Actor: {actor.email} (ID: {actor.id})"
            )
            raise Forbidden(f'You are not allowed to cancel this {booking.kind_label}.')

        if booking.is_terminal:
            raise InvalidState(
                f'This {booking.kind_label} is already {booking.status} '
                f'and cannot be cancelled.'
            )

        return self.transition(booking, BookingStatus.CANCELLED, actor)

    def build_notifications(self, booking, event, actor):
        """
        Build the account and operator messages for a booking event.

        Args:
            booking: Reservation or TestDrive
            event: CREATED or STATUS_CHANGED
            actor: Account that triggered the event

        Returns:
            list[Notification]: [account message, operator message]
        """
        vehicle = booking.vehicle
        vehicle_identity = f'{vehicle.name} ({vehicle.brand} {vehicle.model_name} {vehicle.year})'
        dates = booking.describe_dates()
        status_label = booking.get_status_display()

        if event == self.CREATED:
            account_subject = f'Your {booking.kind_label} request has been received'
            account_text = (
                f'We received your {booking.kind_label} request for {vehicle_identity} '
                f'{dates}. Current status: {status_label}.'
            )
            operator_subject = f'New {booking.kind_label} request'
            operator_text = (
                f'{booking.account.email} requested a {booking.kind_label} for '
                f'{vehicle_identity} {dates}.'
            )
        elif event == self.STATUS_CHANGED:
            account_subject = f'Your {booking.kind_label} is now {status_label.lower()}'
            account_text = (
                f'The status of your {booking.kind_label} for {vehicle_identity} '
                f'{dates} is now: {status_label}.'
            )
            operator_subject = f'{booking.kind_label.capitalize()} {booking.pk} {status_label.lower()}'
            operator_text = (
                f'The {booking.kind_label} of {booking.account.email} for '
                f'{vehicle_identity} {dates} is now: {status_label} '
                f'(changed by {actor.email}).'
            )
        else:
            raise ValueError(f'Unknown booking event: {event}')

        if booking.message:
            operator_text += f'\n\nMessage from the customer:\n{booking.message}'

        signature = f'\n\nThe {self.config.site_name} team'

        return [
            Notification(
                recipient=booking.account.email,
                subject=account_subject,
                body=f'Hello,\n\n{account_text}{signature}',
            ),
            Notification(
                recipient=self.config.operator_email,
                subject=operator_subject,
                body=f'{operator_text}{signature}',
            ),
        ]
