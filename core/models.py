"""
Data model for the Vehicle Marketplace.

Accounts, the vehicle catalog, favorites, and the two kinds of vehicle
bookings (reservations and test drives).
"""

import hashlib
import secrets

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .validators import validate_image_urls, validate_specs, validate_vehicle_year


class Role(models.TextChoices):
    """Closed set of access tiers."""

    USER = 'user', _('User')
    ADMIN = 'admin', _('Administrator')


class BookingStatus(models.TextChoices):
    """Lifecycle states shared by reservations and test drives."""

    PENDING = 'pending', _('Pending')
    CONFIRMED = 'confirmed', _('Confirmed')
    CANCELLED = 'cancelled', _('Cancelled')
    COMPLETED = 'completed', _('Completed')


TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


def hash_reset_token(raw_token):
    """Return the SHA-256 hex digest stored in place of a raw reset token."""
    return hashlib.sha256(raw_token.encode('utf-8')).hexdigest()


class AccountManager(BaseUserManager):
    """
    Manager for email-identified accounts.
    """

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set.')

        email = self.normalize_email(email).lower()
        account = self.model(email=email, **extra_fields)
        account.set_password(password)
        account.save(using=self._db)
        return account

    def create_user(self, email, password=None, **extra_fields):
        """Create an ordinary account."""
        extra_fields.setdefault('role', Role.USER)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """Create an administrator that can also use the Django admin site."""
        extra_fields.setdefault('role', Role.ADMIN)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('role') != Role.ADMIN:
            raise ValueError('Superuser must have role=admin.')

        return self._create_user(email, password, **extra_fields)


class Account(AbstractUser):
    """
    Registered identity of the marketplace.

    The email address is the login identifier; ``username`` is removed.

    Additional fields:
    - role: 'user' or 'admin'
    - reset_password_token: SHA-256 hash of the pending reset token
    - reset_password_expire: Expiry of the pending reset token
    - favorites: Ordered favorite vehicles (through Favorite)
    - created_at: Account creation timestamp
    - updated_at: Last update timestamp
    """

    username = None

    email = models.EmailField(
        _('email address'),
        unique=True,
        blank=False,
        null=False,
        error_messages={
            'unique': _('A user with that email already exists.'),
        },
        help_text=_('Required. Login identifier.')
    )

    role = models.CharField(
        _('role'),
        max_length=10,
        choices=Role.choices,
        default=Role.USER,
        help_text=_('Access tier used for authorization decisions.')
    )

    reset_password_token = models.CharField(
        _('reset password token'),
        max_length=64,
        blank=True,
        default='',
        db_index=True,
        help_text=_('SHA-256 hash of the pending password reset token.')
    )

    reset_password_expire = models.DateTimeField(
        _('reset password expiry'),
        blank=True,
        null=True
    )

    favorites = models.ManyToManyField(
        'Vehicle',
        through='Favorite',
        related_name='favorited_by',
        blank=True
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = AccountManager()

    class Meta:
        verbose_name = _('account')
        verbose_name_plural = _('accounts')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['role'], name='core_accoun_role_3f9a2b_idx'),
            models.Index(fields=['is_active'], name='core_accoun_is_acti_7e41c0_idx'),
        ]

    def __str__(self):
        return self.email

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @staticmethod
    def normalize_role(value):
        """
        Coerce a raw role value into a Role member.

        Incidental whitespace and case are stripped once, here, so that every
        access decision downstream compares against a validated enum member.

        Raises:
            ValidationError: If the value is not a known role
        """
        if isinstance(value, Role):
            return value

        cleaned = str(value or '').strip().lower()
        try:
            return Role(cleaned)
        except ValueError:
            raise ValidationError({
                'role': _('Role must be one of: %(roles)s.') % {
                    'roles': ', '.join(Role.values)
                }
            })

    def favorite_ids(self):
        """Return favorite vehicle ids in the order they were added."""
        return list(
            self.favorite_records.order_by('created_at', 'id').values_list('vehicle_id', flat=True)
        )

    def issue_reset_token(self, lifetime):
        """
        Generate a password reset token.

        Only the hash and the expiry are kept on the account; the raw token is
        returned so it can be mailed. The caller is responsible for saving.

        Args:
            lifetime: timedelta the token stays valid

        Returns:
            str: Raw (unhashed) token
        """
        raw_token = secrets.token_hex(20)
        self.reset_password_token = hash_reset_token(raw_token)
        self.reset_password_expire = timezone.now() + lifetime
        return raw_token

    def clear_reset_token(self):
        self.reset_password_token = ''
        self.reset_password_expire = None

    def save(self, *args, **kwargs):
        """
        Normalize email and role before persisting.

        Admins are flagged as staff so they can use the Django admin site;
        any other role loses the staff and superuser flags.
        Updates run full_clean; creation relies on the database unique index so
        that concurrent duplicate registrations surface as IntegrityError.
        """
        if self.email:
            self.email = self.email.lower().strip()

        self.role = self.normalize_role(self.role)
        if self.role != Role.ADMIN:
            self.is_superuser = False
        self.is_staff = self.role == Role.ADMIN

        if self.pk is not None:
            self.full_clean(exclude=['password'])

        super().save(*args, **kwargs)


class Vehicle(models.Model):
    """
    Catalog listing, either for sale ('buy') or for rent ('rent').

    Conditionally required fields:
    - mileage, price: required when listing_type is 'buy'
    - daily_rate, passengers: required when listing_type is 'rent'
    """

    class ListingType(models.TextChoices):
        BUY = 'buy', _('For sale')
        RENT = 'rent', _('For rent')

    class Fuel(models.TextChoices):
        PETROL = 'petrol', _('Petrol')
        DIESEL = 'diesel', _('Diesel')
        ELECTRIC = 'electric', _('Electric')
        HYBRID = 'hybrid', _('Hybrid')
        OTHER = 'other', _('Other')

    name = models.CharField(_('name'), max_length=100)

    listing_type = models.CharField(
        _('type'),
        max_length=4,
        choices=ListingType.choices,
        help_text=_('Whether the vehicle is for sale or for rent')
    )

    brand = models.CharField(_('brand'), max_length=50)
    model_name = models.CharField(_('model'), max_length=50)

    year = models.PositiveSmallIntegerField(
        _('year'),
        validators=[validate_vehicle_year]
    )

    mileage = models.PositiveIntegerField(
        _('mileage'),
        blank=True,
        null=True,
        help_text=_('Odometer reading, required for vehicles for sale')
    )

    fuel = models.CharField(_('fuel'), max_length=10, choices=Fuel.choices)

    price = models.DecimalField(
        _('price'),
        max_digits=12,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[MinValueValidator(0, message=_('Price cannot be negative.'))],
        help_text=_('Sale price, required for vehicles for sale')
    )

    daily_rate = models.DecimalField(
        _('daily rate'),
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        validators=[MinValueValidator(0, message=_('Daily rate cannot be negative.'))],
        help_text=_('Rental price per day, required for vehicles for rent')
    )

    passengers = models.PositiveSmallIntegerField(
        _('passengers'),
        blank=True,
        null=True,
        validators=[MinValueValidator(1, message=_('Must seat at least 1 passenger.'))],
        help_text=_('Seating capacity, required for vehicles for rent')
    )

    description = models.CharField(_('description'), max_length=1000)

    images = models.JSONField(
        _('images'),
        default=list,
        validators=[validate_image_urls],
        error_messages={
            'blank': _('At least one image is required for the vehicle.'),
        }
    )

    is_featured = models.BooleanField(_('featured'), default=False)

    specs = models.JSONField(
        _('specs'),
        default=dict,
        blank=True,
        validators=[validate_specs]
    )

    owner = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='vehicles',
        help_text=_('Administrator who listed the vehicle')
    )

    created_at = models.DateTimeField(_('created at'), auto_now_add=True)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    class Meta:
        verbose_name = _('vehicle')
        verbose_name_plural = _('vehicles')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['listing_type'], name='core_vehicl_listing_5c0e1d_idx'),
            models.Index(fields=['brand'], name='core_vehicl_brand_0b7f4a_idx'),
            models.Index(fields=['is_featured'], name='core_vehicl_is_feat_8d2c61_idx'),
        ]

    def __str__(self):
        return f'{self.name} ({self.brand} {self.model_name} {self.year})'

    def clean(self):
        """
        Enforce the fields that depend on the listing type.

        Raises:
            ValidationError: Listing every missing conditional field
        """
        super().clean()

        errors = {}
        if self.listing_type == self.ListingType.BUY:
            if self.mileage is None:
                errors['mileage'] = _('Mileage is required for vehicles for sale.')
            if self.price is None:
                errors['price'] = _('Price is required for vehicles for sale.')
        elif self.listing_type == self.ListingType.RENT:
            if self.daily_rate is None:
                errors['daily_rate'] = _('Daily rate is required for vehicles for rent.')
            if self.passengers is None:
                errors['passengers'] = _('Passenger count is required for vehicles for rent.')

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class Favorite(models.Model):
    """
    Join record between an account and a favorite vehicle.

    The (account, vehicle) pair is unique at the database level.
    """

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name='favorite_records'
    )

    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.CASCADE,
        related_name='favorite_records'
    )

    created_at = models.DateTimeField(_('created at'), default=timezone.now)

    class Meta:
        verbose_name = _('favorite')
        verbose_name_plural = _('favorites')
        ordering = ['created_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['account', 'vehicle'],
                name='unique_favorite_per_account'
            )
        ]

    def __str__(self):
        return f'{self.account_id} -> {self.vehicle_id}'


class VehicleBooking(models.Model):
    """
    Common fields of reservations and test drives.

    Both reference one vehicle and one account, carry a status and an
    optional message. They are never deleted; cancellation is a status, and
    a vehicle or account with bookings cannot be deleted.
    """

    vehicle = models.ForeignKey(
        Vehicle,
        on_delete=models.PROTECT,
        related_name='%(class)ss'
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name='%(class)ss'
    )

    status = models.CharField(
        _('status'),
        max_length=10,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING
    )

    message = models.CharField(
        _('message'),
        max_length=500,
        blank=True,
        default='',
        error_messages={
            'max_length': _('The message cannot exceed 500 characters.'),
        }
    )

    created_at = models.DateTimeField(_('created at'), default=timezone.now)
    updated_at = models.DateTimeField(_('updated at'), auto_now=True)

    # Human readable kind used in notifications, e.g. "reservation"
    kind_label = ''

    class Meta:
        abstract = True
        ordering = ['-created_at']

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def describe_dates(self):
        """Return the booked date(s) as display text."""
        raise NotImplementedError

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)


class Reservation(VehicleBooking):
    """
    Rental of a vehicle over a date range (end_date >= start_date).
    """

    start_date = models.DateField(_('start date'))
    end_date = models.DateField(_('end date'))

    total_price = models.DecimalField(
        _('total price'),
        max_digits=12,
        decimal_places=2,
        blank=True,
        null=True
    )

    kind_label = 'reservation'

    class Meta(VehicleBooking.Meta):
        verbose_name = _('reservation')
        verbose_name_plural = _('reservations')
        indexes = [
            models.Index(fields=['status'], name='core_reserv_status_4b8e9d_idx'),
            models.Index(fields=['account'], name='core_reserv_account_1d6f3a_idx'),
        ]

    def __str__(self):
        return f'Reservation {self.pk} by {self.account.email} - {self.vehicle.name}'

    def clean(self):
        super().clean()

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({
                'end_date': _('The end date must be on or after the start date.')
            })

    def describe_dates(self):
        return f'from {self.start_date:%Y-%m-%d} to {self.end_date:%Y-%m-%d}'


class TestDrive(VehicleBooking):
    """
    Request to test drive a vehicle at a given date and time.
    """

    test_drive_date = models.DateTimeField(_('test drive date'))

    kind_label = 'test drive'

    # Not a pytest test class
    __test__ = False

    class Meta(VehicleBooking.Meta):
        verbose_name = _('test drive')
        verbose_name_plural = _('test drives')
        indexes = [
            models.Index(fields=['status'], name='core_testdr_status_9a2c5e_idx'),
            models.Index(fields=['account'], name='core_testdr_account_6e0b7f_idx'),
        ]

    def __str__(self):
        return f'Test drive {self.pk} by {self.account.email} - {self.vehicle.name}'

    def clean(self):
        super().clean()

        # Only checked on creation so past test drives can still be completed
        if self._state.adding and self.test_drive_date:
            created_at = self.created_at or timezone.now()
            if self.test_drive_date < created_at:
                raise ValidationError({
                    'test_drive_date': _('The test drive date cannot be in the past.')
                })

    def describe_dates(self):
        return f'on {timezone.localtime(self.test_drive_date):%Y-%m-%d at %H:%M}'
