import os
import sys
import django
import random
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
from faker import Faker

# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set up Django environment
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'vehicle_marketplace.settings')
django.setup()

from core.models import (
    Account, Role, Vehicle, Favorite, Reservation, TestDrive, BookingStatus
)

fake = Faker()

CATALOG = {
    'Renault': ['Clio', 'Megane', 'Captur', 'Zoe'],
    'Peugeot': ['208', '308', '3008', '5008'],
    'Toyota': ['Yaris', 'Corolla', 'RAV4', 'Prius'],
    'Volkswagen': ['Golf', 'Polo', 'Tiguan', 'ID.3'],
    'Tesla': ['Model 3', 'Model Y'],
}


def create_accounts(num_users=20):
    print(f"Creating 1 admin and {num_users} users...")

    admin = Account.objects.create_superuser(
        email=fake.unique.email(),
        password='password123',
        first_name=fake.first_name(),
        last_name=fake.last_name(),
    )

    users = []
    for _ in range(num_users):
        user = Account.objects.create_user(
            email=fake.unique.email(),
            password='password123',
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            role=Role.USER,
        )
        users.append(user)

    print(f"Created admin {admin.email} and {len(users)} users.")
    return admin, users


def create_vehicles(admin, num_vehicles=30):
    print("Creating vehicles...")
    vehicles = []

    for _ in range(num_vehicles):
        brand = random.choice(list(CATALOG))
        model_name = random.choice(CATALOG[brand])
        listing_type = random.choice(Vehicle.ListingType.values)

        fields = {
            'name': f'{brand} {model_name}',
            'listing_type': listing_type,
            'brand': brand,
            'model_name': model_name,
            'year': random.randint(2012, timezone.now().year),
            'fuel': 'electric' if brand == 'Tesla' else random.choice(Vehicle.Fuel.values),
            'description': fake.paragraph()[:1000],
            'images': [f'https://placehold.co/600x400?text={brand}+{model_name}'.replace(' ', '+')],
            'is_featured': random.random() < 0.2,
            'specs': {'color': fake.color_name(), 'gearbox': random.choice(['manual', 'automatic'])},
            'owner': admin,
        }

        if listing_type == Vehicle.ListingType.BUY:
            fields['mileage'] = random.randint(0, 200000)
            fields['price'] = Decimal(random.uniform(5000.0, 60000.0)).quantize(Decimal('0.01'))
        else:
            fields['daily_rate'] = Decimal(random.uniform(25.0, 200.0)).quantize(Decimal('0.01'))
            fields['passengers'] = random.choice([2, 4, 5, 7])

        vehicles.append(Vehicle.objects.create(**fields))

    print(f"Created {len(vehicles)} vehicles.")
    return vehicles


def create_favorites(users, vehicles):
    print("Creating favorites...")
    count = 0

    for user in users:
        for vehicle in random.sample(vehicles, random.randint(0, 4)):
            Favorite.objects.create(account=user, vehicle=vehicle)
            count += 1

    print(f"Created {count} favorites.")


def create_bookings(users, vehicles):
    print("Creating reservations and test drives...")
    rentals = [v for v in vehicles if v.listing_type == Vehicle.ListingType.RENT]
    reservations = []
    test_drives = []

    for user in users:
        # Each user makes 0-2 reservations and 0-2 test drive requests
        for _ in range(random.randint(0, 2) if rentals else 0):
            vehicle = random.choice(rentals)
            start_date = timezone.localdate() + timedelta(days=random.randint(1, 60))
            end_date = start_date + timedelta(days=random.randint(0, 10))
            reservations.append(Reservation.objects.create(
                vehicle=vehicle,
                account=user,
                start_date=start_date,
                end_date=end_date,
                total_price=vehicle.daily_rate * ((end_date - start_date).days + 1),
                status=random.choice(BookingStatus.values),
                message=fake.sentence(),
            ))

        for _ in range(random.randint(0, 2)):
            test_drives.append(TestDrive.objects.create(
                vehicle=random.choice(vehicles),
                account=user,
                test_drive_date=timezone.now() + timedelta(days=random.randint(1, 30), hours=random.randint(0, 8)),
                status=random.choice(BookingStatus.values),
                message=fake.sentence(),
            ))

    print(f"Created {len(reservations)} reservations and {len(test_drives)} test drives.")
    return reservations, test_drives


def main():
    print("Starting database population...")

    admin, users = create_accounts(num_users=20)

    vehicles = create_vehicles(admin, num_vehicles=30)

    create_favorites(users, vehicles)

    create_bookings(users, vehicles)

    print("Database population completed successfully!")

if __name__ == '__main__':
    main()
