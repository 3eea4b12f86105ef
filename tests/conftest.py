"""
Shared fixtures for the marketplace test suite.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import Reservation, Role, TestDrive, Vehicle
from core.tokens import issue_token

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    """Clear Django cache before each test to reset throttle limits."""
    cache.clear()


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


def authenticate(client, account):
    """Attach a bearer token for the account to the client."""
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_token(account)}')
    return client


@pytest.fixture
def user(db):
    """Create a regular account."""
    return User.objects.create_user(
        email='alice@example.com',
        password='secret123',
        role=Role.USER
    )


@pytest.fixture
def other_user(db):
    """Create a second regular account."""
    return User.objects.create_user(
        email='bob@example.com',
        password='secret123',
        role=Role.USER
    )


@pytest.fixture
def admin(db):
    """Create an administrator."""
    return User.objects.create_superuser(
        email='admin@example.com',
        password='adminpass123'
    )


@pytest.fixture
def other_admin(db):
    """Create a second administrator."""
    return User.objects.create_superuser(
        email='admin2@example.com',
        password='adminpass123'
    )


@pytest.fixture
def user_client(user):
    return authenticate(APIClient(), user)


@pytest.fixture
def other_user_client(other_user):
    return authenticate(APIClient(), other_user)


@pytest.fixture
def admin_client(admin):
    return authenticate(APIClient(), admin)


@pytest.fixture
def rental_vehicle(admin):
    """Create a vehicle listed for rent at 50.00 per day."""
    return Vehicle.objects.create(
        name='City Runner',
        listing_type=Vehicle.ListingType.RENT,
        brand='Renault',
        model_name='Clio',
        year=2021,
        fuel=Vehicle.Fuel.PETROL,
        daily_rate=Decimal('50.00'),
        passengers=5,
        description='Compact city car.',
        images=['https://cdn.example.com/clio.jpg'],
        owner=admin
    )


@pytest.fixture
def sale_vehicle(admin):
    """Create a vehicle listed for sale."""
    return Vehicle.objects.create(
        name='Family Wagon',
        listing_type=Vehicle.ListingType.BUY,
        brand='Peugeot',
        model_name='308',
        year=2019,
        mileage=48000,
        fuel=Vehicle.Fuel.DIESEL,
        price=Decimal('14500.00'),
        description='Well maintained station wagon.',
        images=['https://cdn.example.com/308.jpg'],
        owner=admin
    )


@pytest.fixture
def reservation(user, rental_vehicle):
    """Create a pending reservation owned by ``user``."""
    start_date = timezone.localdate() + timedelta(days=7)
    end_date = start_date + timedelta(days=2)
    return Reservation.objects.create(
        vehicle=rental_vehicle,
        account=user,
        start_date=start_date,
        end_date=end_date,
        total_price=Decimal('150.00'),
        message='Airport pickup please.'
    )


@pytest.fixture
def pending_test_drive(user, sale_vehicle):
    """Create a pending test drive owned by ``user``."""
    return TestDrive.objects.create(
        vehicle=sale_vehicle,
        account=user,
        test_drive_date=timezone.now() + timedelta(days=3)
    )


@pytest.fixture
def client_for():
    """Return a factory building an authenticated client for any account."""
    def make_client(account):
        return authenticate(APIClient(), account)
    return make_client
