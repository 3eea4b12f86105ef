"""
Serializers for the Vehicle Marketplace API.

Request and response bodies use camelCase keys (isActive, dailyRate,
startDate, ...), mapped onto the snake_case model fields with ``source``.
"""

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers
from rest_framework.exceptions import NotFound

from .models import Account, BookingStatus, Favorite, Reservation, TestDrive, Vehicle


def get_vehicle_or_404(vehicle_id):
    """
    Look up a vehicle by id.

    Raises:
        NotFound: If no vehicle has this id
    """
    try:
        return Vehicle.objects.get(pk=vehicle_id)
    except Vehicle.DoesNotExist:
        raise NotFound('Vehicle not found.')


# ============================================================================
# Account Serializers
# ============================================================================

class RegisterSerializer(serializers.Serializer):
    """
    Serializer for account registration.

    Fields:
    - email: Required, valid email format (uniqueness is checked on create)
    - password: Required, must pass Django's password validators
    """

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_email(self, value):
        return value.lower().strip()

    def validate_password(self, value):
        """
        Validate password strength using Django's password validators.
        """
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))

        return value


class LoginSerializer(serializers.Serializer):
    """
    Serializer for login with email and password.

    Minimal validation to prevent user enumeration attacks.
    Actual authentication happens in core.accounts.
    """

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField(required=True)


class ResetPasswordSerializer(serializers.Serializer):
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_password(self, value):
        try:
            validate_password(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(list(e.messages))

        return value


class ContactSerializer(serializers.Serializer):
    """
    Contact form message sent to the operator. Every field is required.
    """

    name = serializers.CharField(required=True, max_length=100)
    email = serializers.EmailField(required=True)
    subject = serializers.CharField(required=True, max_length=200)
    message = serializers.CharField(required=True, max_length=5000)


class AccountSerializer(serializers.ModelSerializer):
    """
    Account representation returned by auth and admin endpoints.

    Never exposes the password hash or reset token fields.
    """

    isActive = serializers.BooleanField(source='is_active', read_only=True)
    favorites = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Account
        fields = ['id', 'email', 'role', 'isActive', 'favorites', 'createdAt']
        read_only_fields = fields

    def get_favorites(self, obj):
        return obj.favorite_ids()


class AccountSummarySerializer(serializers.ModelSerializer):
    """Minimal account information nested in bookings."""

    class Meta:
        model = Account
        fields = ['id', 'email']
        read_only_fields = fields


class AccountAdminUpdateSerializer(serializers.Serializer):
    """
    Fields an administrator may change on another account.

    Fields:
    - role: Optional, 'user' or 'admin' (case and whitespace insensitive)
    - isActive: Optional, blocks or unblocks the account
    """

    role = serializers.CharField(required=False)
    isActive = serializers.BooleanField(required=False, source='is_active')

    def validate_role(self, value):
        """
        Normalize the role to a Role member.

        Raises:
            ValidationError: If the role is unknown
        """
        try:
            return Account.normalize_role(value)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict['role'])

    def update(self, instance, validated_data):
        if 'role' in validated_data:
            instance.role = validated_data['role']
        if 'is_active' in validated_data:
            instance.is_active = validated_data['is_active']

        instance.save()
        return instance


# ============================================================================
# Vehicle Serializers
# ============================================================================

class VehicleSerializer(serializers.ModelSerializer):
    """
    Serializer for catalog vehicles (read and admin write).

    Fields:
    - type: Required, 'buy' or 'rent'
    - mileage, price: Required for 'buy' (enforced by Vehicle.clean)
    - dailyRate, passengers: Required for 'rent' (enforced by Vehicle.clean)
    - images: http(s) URLs or base64 data URIs, stored through the media
      store passed in the serializer context as ``media_store``
    - user: Read-only id of the administrator who listed the vehicle
    """

    type = serializers.ChoiceField(source='listing_type', choices=Vehicle.ListingType.choices)
    model = serializers.CharField(source='model_name', max_length=50)
    dailyRate = serializers.DecimalField(
        source='daily_rate',
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True
    )
    images = serializers.ListField(
        child=serializers.CharField(),
        required=False,
        allow_empty=True
    )
    isFeatured = serializers.BooleanField(source='is_featured', required=False)
    specs = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    user = serializers.PrimaryKeyRelatedField(source='owner', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Vehicle
        fields = [
            'id', 'name', 'type', 'brand', 'model', 'year', 'mileage', 'fuel',
            'price', 'dailyRate', 'passengers', 'description', 'images',
            'isFeatured', 'specs', 'user', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['id', 'user', 'createdAt', 'updatedAt']
        extra_kwargs = {
            'mileage': {'required': False, 'allow_null': True},
            'price': {'required': False, 'allow_null': True},
            'passengers': {'required': False, 'allow_null': True},
        }

    def _store_images(self, validated_data):
        """Replace the raw image payloads with stored URLs."""
        media_store = self.context['media_store']
        validated_data['images'] = media_store.store_images(validated_data.get('images'))
        return validated_data

    def create(self, validated_data):
        validated_data = self._store_images(validated_data)
        validated_data['owner'] = self.context['request'].user
        try:
            return super().create(validated_data)
        except Exception:
            self.context['media_store'].discard_saved()
            raise

    def update(self, instance, validated_data):
        if 'images' in validated_data:
            validated_data = self._store_images(validated_data)
        try:
            return super().update(instance, validated_data)
        except Exception:
            self.context['media_store'].discard_saved()
            raise


class VehicleSummarySerializer(serializers.ModelSerializer):
    """Vehicle fields shown in favorites and bookings."""

    type = serializers.CharField(source='listing_type', read_only=True)
    model = serializers.CharField(source='model_name', read_only=True)
    dailyRate = serializers.DecimalField(
        source='daily_rate', max_digits=10, decimal_places=2, read_only=True
    )

    class Meta:
        model = Vehicle
        fields = ['id', 'name', 'type', 'brand', 'model', 'year', 'price', 'dailyRate', 'images']
        read_only_fields = fields


# ============================================================================
# Favorite Serializers
# ============================================================================

class FavoriteRequestSerializer(serializers.Serializer):
    """Body of the favorite endpoints: {"vehicleId": <id>}."""

    vehicleId = serializers.IntegerField(required=True, min_value=1)

    def validate_vehicleId(self, value):
        """
        Resolve the vehicle.

        Raises:
            NotFound: If the vehicle does not exist
        """
        return get_vehicle_or_404(value)


class FavoriteSerializer(serializers.ModelSerializer):
    """Favorite record with the nested vehicle."""

    vehicle = VehicleSerializer(read_only=True)
    user = serializers.PrimaryKeyRelatedField(source='account', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Favorite
        fields = ['id', 'user', 'vehicle', 'createdAt']
        read_only_fields = fields


# ============================================================================
# Booking Serializers
# ============================================================================

class BookingCreateSerializer(serializers.Serializer):
    """
    Common fields of reservation and test drive requests.

    The requesting account is taken from the request and the status always
    starts as 'pending'.
    """

    vehicle = serializers.IntegerField(required=True, min_value=1)
    message = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=500,
        error_messages={'max_length': 'The message cannot exceed 500 characters.'}
    )

    def validate_vehicle(self, value):
        """
        Resolve the vehicle.

        Raises:
            NotFound: If the vehicle does not exist
        """
        return get_vehicle_or_404(value)


class ReservationCreateSerializer(BookingCreateSerializer):
    """
    Serializer for creating reservations.

    Fields:
    - vehicle: Required, id of a vehicle listed for rent
    - startDate: Required
    - endDate: Required, on or after startDate
    - message: Optional, max 500 characters

    The total price is computed from the daily rate and the number of days
    (both ends included).
    """

    startDate = serializers.DateField(required=True, source='start_date')
    endDate = serializers.DateField(required=True, source='end_date')

    def validate_vehicle(self, value):
        vehicle = super().validate_vehicle(value)

        if vehicle.listing_type != Vehicle.ListingType.RENT:
            raise serializers.ValidationError('This vehicle is not available for rent.')

        return vehicle

    def validate(self, attrs):
        """
        Object-level validation of the date range.

        Raises:
            ValidationError: If endDate is before startDate
        """
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({
                'endDate': 'The end date must be on or after the start date.'
            })

        return attrs

    def create(self, validated_data):
        vehicle = validated_data['vehicle']
        days = (validated_data['end_date'] - validated_data['start_date']).days + 1
        total_price = vehicle.daily_rate * days if vehicle.daily_rate is not None else None

        return Reservation.objects.create(
            account=self.context['request'].user,
            status=BookingStatus.PENDING,
            total_price=total_price,
            **validated_data
        )


class TestDriveCreateSerializer(BookingCreateSerializer):
    """
    Serializer for creating test drive requests.

    Fields:
    - vehicle: Required, any catalog vehicle
    - testDriveDate: Required, not in the past (checked by TestDrive.clean)
    - message: Optional, max 500 characters
    """

    testDriveDate = serializers.DateTimeField(required=True, source='test_drive_date')

    def create(self, validated_data):
        return TestDrive.objects.create(
            account=self.context['request'].user,
            status=BookingStatus.PENDING,
            **validated_data
        )


class ReservationSerializer(serializers.ModelSerializer):
    """Reservation with nested vehicle and account summaries."""

    vehicle = VehicleSummarySerializer(read_only=True)
    user = AccountSummarySerializer(source='account', read_only=True)
    startDate = serializers.DateField(source='start_date', read_only=True)
    endDate = serializers.DateField(source='end_date', read_only=True)
    totalPrice = serializers.DecimalField(
        source='total_price', max_digits=12, decimal_places=2, read_only=True
    )
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'vehicle', 'user', 'startDate', 'endDate', 'totalPrice',
            'status', 'message', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class TestDriveSerializer(serializers.ModelSerializer):
    """Test drive with nested vehicle and account summaries."""

    vehicle = VehicleSummarySerializer(read_only=True)
    user = AccountSummarySerializer(source='account', read_only=True)
    testDriveDate = serializers.DateTimeField(source='test_drive_date', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = TestDrive
        fields = [
            'id', 'vehicle', 'user', 'testDriveDate', 'status', 'message',
            'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class BookingStatusUpdateSerializer(serializers.Serializer):
    """
    Body of the admin status update: {"status": "confirmed"}.

    Only the states an administrator can move a booking into are accepted;
    whether the move is allowed from the current state is decided by the
    status transition engine.
    """

    status = serializers.ChoiceField(
        required=True,
        choices=[
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
        ],
        error_messages={
            'invalid_choice': 'Invalid status. Must be one of: confirmed, cancelled, completed.'
        }
    )

