"""
API views for the Vehicle Marketplace.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, ProtectedError
from django.db.models.functions import TruncMonth
from django.shortcuts import get_object_or_404
from django.utils.functional import cached_property
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import accounts
from .conf import MarketplaceConfig
from .exceptions import Conflict, Forbidden, InvalidCredentials
from .media import MediaStore
from .models import Account, BookingStatus, Favorite, Reservation, TestDrive, Vehicle
from .notifications import NotificationDispatcher
from .pagination import EnvelopePagination
from .permissions import (
    ACCOUNT_DEACTIVATE,
    CanManageAccount,
    IsAdmin,
    IsBookingOwnerOrAdmin,
    can_manage_account,
)
from .serializers import (
    AccountAdminUpdateSerializer,
    AccountSerializer,
    BookingStatusUpdateSerializer,
    ContactSerializer,
    FavoriteRequestSerializer,
    FavoriteSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
    ResetPasswordSerializer,
    TestDriveCreateSerializer,
    TestDriveSerializer,
    VehicleSerializer,
    VehicleSummarySerializer,
)
from .tokens import issue_token
from .transitions import StatusTransitionEngine

logger = logging.getLogger(__name__)

MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def get_client_ip(request):
    """
    Get client IP address from request.
    Handles proxy headers for accurate IP detection.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0]
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip


class MarketplaceServicesMixin:
    """
    Builds the domain components of a request from the MARKETPLACE settings.
    """

    @cached_property
    def config(self):
        return MarketplaceConfig.from_settings()

    @cached_property
    def dispatcher(self):
        return NotificationDispatcher(self.config)

    @cached_property
    def transition_engine(self):
        return StatusTransitionEngine(self.dispatcher, self.config)

    @cached_property
    def password_reset_service(self):
        return accounts.PasswordResetService(self.config, self.dispatcher)

    @cached_property
    def media_store(self):
        return MediaStore(self.config)


def token_response(account, status_code=status.HTTP_200_OK):
    """Build the {success, token, user} body returned by the auth endpoints."""
    return Response({
        'success': True,
        'token': issue_token(account),
        'user': AccountSerializer(account).data,
    }, status=status_code)


# ============================================================================
# Authentication Views
# ============================================================================

class RegisterView(MarketplaceServicesMixin, APIView):
    """
    API endpoint for account registration.

    Security features:
    - Passwords hashed with Django's password hasher
    - Email uniqueness enforced case-insensitively and by the database index
    - New accounts always get the 'user' role

    POST /api/auth/register
    Request body: {"email": "user@example.com", "password": "secret123"}

    Success response (201):
    {
        "success": true,
        "token": "<jwt>",
        "user": {"id": 1, "email": "user@example.com", "role": "user", ...}
    }

    Error responses:
    - 400: Invalid email or password, or email already registered
    """
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = accounts.register(
            serializer.validated_data['email'],
            serializer.validated_data['password']
        )

        logger.info(f"Registration from IP: {get_client_ip(request)}, Account ID: {account.id}")

        self.dispatcher.dispatch_best_effort([self.dispatcher.welcome(account)])

        return token_response(account, status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    API endpoint for login with JWT token generation.

    Security features:
    - Rate limiting ('login' throttle scope)
    - Generic error message to prevent user enumeration
    - Failed login attempt logging for security monitoring
    - Case-insensitive email lookup

    POST /api/auth/login
    Request body: {"email": "user@example.com", "password": "secret123"}

    Success response (200):
    {
        "success": true,
        "token": "<jwt>",
        "user": {"id": 1, "email": "user@example.com", "role": "user", "favorites": [3, 7], ...}
    }

    Error response (401): {"success": false, "msg": "Invalid credentials"}
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'login'

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email'].lower().strip()
        client_ip = get_client_ip(request)

        try:
            account = accounts.authenticate(
                request,
                email,
                serializer.validated_data['password']
            )
        except InvalidCredentials:
            logger.warning(f"Failed login attempt. Email: {email}, IP: {client_ip}")
            raise

        logger.info(f"Successful login. Email: {email}, IP: {client_ip}")

        return token_response(account)


class ForgotPasswordView(MarketplaceServicesMixin, APIView):
    """
    API endpoint requesting a password reset email.

    Security features:
    - Rate limiting ('password_reset' throttle scope)
    - Same response whether or not the email is registered
    - Only the SHA-256 hash of the token is stored, valid 10 minutes

    POST /api/auth/forgotpassword
    Request body: {"email": "user@example.com"}

    Error responses:
    - 400: Invalid email format
    - 500: The reset email could not be sent (the token is discarded)
    """
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'password_reset'

    def post(self, request, *args, **kwargs):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        logger.info(f"Password reset requested from IP: {get_client_ip(request)}")

        self.password_reset_service.request_reset(serializer.validated_data['email'])

        return Response({
            'success': True,
            'msg': 'If your email address is registered, a reset link has been sent.'
        }, status=status.HTTP_200_OK)


class ResetPasswordView(MarketplaceServicesMixin, APIView):
    """
    API endpoint consuming a reset token.

    PUT /api/auth/resetpassword/<token>
    Request body: {"password": "newsecret"}

    Error responses:
    - 400: Invalid or expired token, or password rejected by the validators
    """
    permission_classes = [AllowAny]

    def put(self, request, *args, **kwargs):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = self.password_reset_service.reset_password(
            kwargs.get('token'),
            serializer.validated_data['password']
        )

        logger.info(f"Password reset from IP: {get_client_ip(request)}, Account ID: {account.id}")

        return Response({
            'success': True,
            'msg': 'Password reset successfully.'
        }, status=status.HTTP_200_OK)


class MeView(APIView):
    """
    GET /api/auth/me

    Returns the authenticated account, including its ordered favorites.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response({
            'success': True,
            'data': AccountSerializer(request.user).data
        }, status=status.HTTP_200_OK)


class ContactView(MarketplaceServicesMixin, APIView):
    """
    Public contact form, forwarded by email to the operator.

    POST /api/auth/contact
    Request body: {"name": "...", "email": "...", "subject": "...", "message": "..."}

    Error responses:
    - 400: A field is missing or invalid
    - 500: The email could not be sent
    """
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = ContactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        self.dispatcher.dispatch(self.dispatcher.contact(**serializer.validated_data))

        logger.info(f"Contact message forwarded. IP: {get_client_ip(request)}")

        return Response({
            'success': True,
            'msg': 'Your message has been sent successfully!'
        }, status=status.HTTP_200_OK)


# ============================================================================
# Vehicle Views
# ============================================================================

class VehicleListCreateView(MarketplaceServicesMixin, APIView):
    """
    Catalog listing (public) and vehicle creation (admin).

    GET /api/vehicles
    Query Parameters:
    - type (optional): 'buy' or 'rent'
    - brand (optional): Brand, case-insensitive
    - fuel (optional): Fuel type
    - isFeatured (optional): true/false
    - page, limit (optional): Pagination

    POST /api/vehicles (admin)
    Images are stored through the media store; a placeholder image is used
    when none is provided.

    Error responses:
    - 400: Validation error (including type-dependent required fields)
    - 401: Missing or invalid token (POST)
    - 403: Not an administrator (POST)
    """
    pagination_class = EnvelopePagination

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAdmin()]

    def get_queryset(self):
        queryset = Vehicle.objects.all().order_by('-created_at', '-id')
        params = self.request.query_params

        if params.get('type'):
            queryset = queryset.filter(listing_type=params['type'])

        if params.get('brand'):
            queryset = queryset.filter(brand__iexact=params['brand'])

        if params.get('fuel'):
            queryset = queryset.filter(fuel=params['fuel'])

        is_featured = params.get('isFeatured')
        if is_featured is not None and is_featured.lower() in ('true', 'false'):
            queryset = queryset.filter(is_featured=is_featured.lower() == 'true')

        return queryset

    def get(self, request, *args, **kwargs):
        paginator = self.pagination_class()
        page = paginator.paginate_queryset(self.get_queryset(), request, view=self)
        serializer = VehicleSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def post(self, request, *args, **kwargs):
        serializer = VehicleSerializer(
            data=request.data,
            context={'request': request, 'media_store': self.media_store}
        )
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.save()

        logger.info(
            f"Vehicle created. ID: {vehicle.id}, "
            f"Admin: {request.user.email} (ID: {request.user.id}), "
            f"IP: {get_client_ip(request)}"
        )

        return Response({
            'success': True,
            'data': VehicleSerializer(vehicle).data
        }, status=status.HTTP_201_CREATED)


class VehicleDetailView(MarketplaceServicesMixin, APIView):
    """
    GET /api/vehicles/<id> (public)
    PUT /api/vehicles/<id> (admin, partial update)
    DELETE /api/vehicles/<id> (admin)
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAdmin()]

    def get(self, request, *args, **kwargs):
        vehicle = get_object_or_404(Vehicle, pk=kwargs.get('pk'))
        return Response({
            'success': True,
            'data': VehicleSerializer(vehicle).data
        }, status=status.HTTP_200_OK)

    def put(self, request, *args, **kwargs):
        vehicle = get_object_or_404(Vehicle, pk=kwargs.get('pk'))

        serializer = VehicleSerializer(
            vehicle,
            data=request.data,
            partial=True,
            context={'request': request, 'media_store': self.media_store}
        )
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.save()

        logger.info(
            f"Vehicle updated. ID: {vehicle.id}, "
            f"Admin: {request.user.email} (ID: {request.user.id})"
        )

        return Response({
            'success': True,
            'data': VehicleSerializer(vehicle).data
        }, status=status.HTTP_200_OK)

    def delete(self, request, *args, **kwargs):
        vehicle = get_object_or_404(Vehicle, pk=kwargs.get('pk'))
        vehicle_id = vehicle.id

        try:
            vehicle.delete()
        except ProtectedError:
            raise Conflict('This vehicle has reservations or test drives and cannot be deleted.')

        logger.info(
            f"Vehicle deleted. ID: {vehicle_id}, "
            f"Admin: {request.user.email} (ID: {request.user.id})"
        )

        return Response({
            'success': True,
            'data': {},
            'msg': 'Vehicle deleted successfully.'
        }, status=status.HTTP_200_OK)


class VehicleAdditionStatsView(APIView):
    """
    Vehicles added per month, in chronological order (admin).

    GET /api/vehicles/stats/additions

    Success response (200):
    {"success": true, "data": [{"monthYear": "Jan 2026", "count": 4}, ...]}
    """
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        rows = (
            Vehicle.objects
            .annotate(month=TruncMonth('created_at'))
            .values('month')
            .annotate(count=Count('id'))
            .order_by('month')
        )

        data = [
            {
                'monthYear': f"{MONTH_NAMES[row['month'].month - 1]} {row['month'].year}",
                'count': row['count'],
            }
            for row in rows
        ]

        return Response({'success': True, 'data': data}, status=status.HTTP_200_OK)


# ============================================================================
# User Administration Views
# ============================================================================

class UserListView(APIView):
    """
    GET /api/users (admin)

    Lists every account, newest first.
    """
    permission_classes = [IsAdmin]

    def get(self, request, *args, **kwargs):
        queryset = Account.objects.all().order_by('-created_at', '-id')
        serializer = AccountSerializer(queryset, many=True)

        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        }, status=status.HTTP_200_OK)


class UserDetailView(MarketplaceServicesMixin, APIView):
    """
    API endpoint for administering one account.

    Security features:
    - Administrators only
    - An administrator cannot modify or delete their own account here
    - An administrator cannot block or delete another administrator
    - Forbidden attempts are logged with the caller IP

    GET /api/users/<id>
    PUT /api/users/<id>   Request body: {"role": "admin", "isActive": false}
    DELETE /api/users/<id>

    The affected account is emailed when it is blocked, unblocked or deleted.

    Error responses:
    - 401: Missing or invalid token
    - 403: Not an administrator, or forbidden target
    - 404: Account not found
    """
    permission_classes = [IsAdmin, CanManageAccount]

    def get_object(self):
        account = get_object_or_404(Account, pk=self.kwargs.get('pk'))
        self.check_object_permissions(self.request, account)
        return account

    def permission_denied(self, request, message=None, code=None):
        if request.user and request.user.is_authenticated:
            logger.warning(
                f"Forbidden account administration attempt. "
                f"Target ID: {self.kwargs.get('pk')}, "
                f"Admin: {request.user.email} (ID: {request.user.id}), "
                f"IP: {get_client_ip(request)}"
            )
        super().permission_denied(request, message=message, code=code)

    def get(self, request, *args, **kwargs):
        account = self.get_object()
        return Response({
            'success': True,
            'data': AccountSerializer(account).data
        }, status=status.HTTP_200_OK)

    def put(self, request, *args, **kwargs):
        """
        Update the role and/or the active flag of another account.

        Steps:
        1. Retrieve the account and check ownership rules
        2. Validate the request body
        3. Refuse to block another administrator
        4. Save and email the account if its active flag changed
        """
        # Step 1: Retrieve account and check permissions
        account = self.get_object()

        # Step 2: Validate body
        serializer = AccountAdminUpdateSerializer(account, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        # Step 3: Blocking another admin
        was_active = account.is_active
        if serializer.validated_data.get('is_active') is False and not can_manage_account(
            request.user, account, ACCOUNT_DEACTIVATE
        ):
            self.permission_denied(request, message='You cannot block another administrator.')

        # Step 4: Save and notify
        account = serializer.save()

        logger.info(
            f"Account updated. ID: {account.id}, Role: {account.role}, "
            f"Active: {account.is_active}, "
            f"Admin: {request.user.email} (ID: {request.user.id})"
        )

        if account.is_active != was_active:
            self.dispatcher.dispatch_best_effort([self.dispatcher.account_status(account)])

        return Response({
            'success': True,
            'data': AccountSerializer(account).data,
            'msg': 'User updated successfully.'
        }, status=status.HTTP_200_OK)

    def delete(self, request, *args, **kwargs):
        account = self.get_object()
        email = account.email
        account_id = account.id

        try:
            account.delete()
        except ProtectedError:
            raise Conflict('This user has reservations or test drives and cannot be deleted.')

        logger.info(
            f"Account deleted. ID: {account_id}, "
            f"Admin: {request.user.email} (ID: {request.user.id})"
        )

        self.dispatcher.dispatch_best_effort([self.dispatcher.account_deleted(email)])

        return Response({
            'success': True,
            'data': {},
            'msg': 'User deleted successfully.'
        }, status=status.HTTP_200_OK)


# ============================================================================
# Favorite Views
# ============================================================================

class FavoriteToggleView(APIView):
    """
    Add a vehicle to the caller's favorites, or remove it if present.

    POST /api/users/favorites/toggle
    Request body: {"vehicleId": 3}

    Success response (200):
    {"success": true, "data": [7, 3], "msg": "Vehicle added to favorites."}

    Error responses:
    - 401: Missing or invalid token
    - 404: Vehicle not found
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = FavoriteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.validated_data['vehicleId']

        with transaction.atomic():
            deleted, _ = Favorite.objects.filter(account=request.user, vehicle=vehicle).delete()

            if deleted:
                msg = 'Vehicle removed from favorites.'
            else:
                Favorite.objects.get_or_create(account=request.user, vehicle=vehicle)
                msg = 'Vehicle added to favorites.'

        return Response({
            'success': True,
            'data': request.user.favorite_ids(),
            'msg': msg
        }, status=status.HTTP_200_OK)


class FavoriteVehiclesView(APIView):
    """
    GET /api/users/favorites

    The caller's favorite vehicles, in the order they were added.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        vehicles = [
            favorite.vehicle
            for favorite in request.user.favorite_records.select_related('vehicle').order_by('created_at', 'id')
        ]
        serializer = VehicleSummarySerializer(vehicles, many=True)

        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        }, status=status.HTTP_200_OK)


class FavoriteListCreateView(APIView):
    """
    Favorite records of the caller.

    GET /api/favorites
    POST /api/favorites   Request body: {"vehicleId": 3}

    Error responses:
    - 401: Missing or invalid token
    - 404: Vehicle not found
    - 409: Vehicle already in favorites
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        favorites = request.user.favorite_records.select_related('vehicle').order_by('created_at', 'id')
        serializer = FavoriteSerializer(favorites, many=True)

        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        }, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = FavoriteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle = serializer.validated_data['vehicleId']

        try:
            with transaction.atomic():
                favorite = Favorite.objects.create(account=request.user, vehicle=vehicle)
        except IntegrityError:
            raise Conflict('This vehicle is already in your favorites.')

        return Response({
            'success': True,
            'data': FavoriteSerializer(favorite).data,
            'msg': 'Vehicle added to favorites.'
        }, status=status.HTTP_201_CREATED)


class FavoriteDeleteView(APIView):
    """
    DELETE /api/favorites/<vehicle_id>

    Error responses:
    - 401: Missing or invalid token
    - 404: The vehicle is not in the caller's favorites
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, *args, **kwargs):
        deleted, _ = Favorite.objects.filter(
            account=request.user,
            vehicle_id=kwargs.get('vehicle_id')
        ).delete()

        if not deleted:
            raise NotFound('Favorite not found or already removed.')

        return Response({
            'success': True,
            'data': {},
            'msg': 'Vehicle removed from favorites.'
        }, status=status.HTTP_200_OK)


# ============================================================================
# Reservation and Test Drive Views
# ============================================================================

class BookingCreateView(MarketplaceServicesMixin, APIView):
    """
    Create a reservation or test drive for the caller.

    The booking starts as 'pending'; the caller and the operator receive a
    best-effort confirmation email.
    """
    permission_classes = [IsAuthenticated]
    create_serializer_class = None
    serializer_class = None

    def post(self, request, *args, **kwargs):
        serializer = self.create_serializer_class(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)
        booking = serializer.save()

        logger.info(
            f"{booking.kind_label.capitalize()} created. ID: {booking.id}, "
            f"Vehicle ID: {booking.vehicle_id}, "
            f"User: {request.user.email} (ID: {request.user.id}), "
            f"IP: {get_client_ip(request)}"
        )

        self.dispatcher.dispatch_best_effort(
            self.transition_engine.build_notifications(
                booking, StatusTransitionEngine.CREATED, request.user
            )
        )

        return Response({
            'success': True,
            'data': self.serializer_class(booking).data
        }, status=status.HTTP_201_CREATED)


class MyBookingsView(APIView):
    """
    List bookings, newest first.

    Users see their own bookings. Administrators see every booking, or one
    account's bookings with ``?user=<id>``.
    """
    permission_classes = [IsAuthenticated]
    model = None
    serializer_class = None

    def get(self, request, *args, **kwargs):
        queryset = self.model.objects.select_related('vehicle', 'account').order_by('-created_at', '-id')

        if request.user.is_admin:
            user_id = request.query_params.get('user')
            if user_id:
                if not user_id.isdigit():
                    raise ValidationError({'user': ['A valid account id is required.']})
                queryset = queryset.filter(account_id=int(user_id))
        else:
            queryset = queryset.filter(account=request.user)

        serializer = self.serializer_class(queryset, many=True)

        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        }, status=status.HTTP_200_OK)


class BookingDetailView(APIView):
    """
    Retrieve one booking (creator or administrator).
    """
    permission_classes = [IsAuthenticated, IsBookingOwnerOrAdmin]
    model = None
    serializer_class = None

    def get(self, request, *args, **kwargs):
        booking = get_object_or_404(
            self.model.objects.select_related('vehicle', 'account'),
            pk=kwargs.get('pk')
        )
        self.check_object_permissions(request, booking)

        return Response({
            'success': True,
            'data': self.serializer_class(booking).data
        }, status=status.HTTP_200_OK)


class BookingCancelView(MarketplaceServicesMixin, APIView):
    """
    Cancel a booking (creator or administrator).

    Security features:
    - Ownership check (creator or administrator)
    - Row lock so concurrent status changes serialize
    - Unauthorized attempts logged with the caller IP

    Error responses:
    - 400: The booking is already cancelled or completed
    - 401: Missing or invalid token
    - 403: Not the creator nor an administrator
    - 404: Booking not found
    """
    permission_classes = [IsAuthenticated]
    model = None
    serializer_class = None

    def put(self, request, *args, **kwargs):
        booking_id = kwargs.get('pk')

        with transaction.atomic():
            booking = get_object_or_404(
                self.model.objects.select_for_update().select_related('vehicle', 'account'),
                pk=booking_id
            )

            try:
                result = self.transition_engine.cancel(booking, request.user)
            except Forbidden:
                logger.warning(
                    f"Unauthorized cancel attempt. ID: {booking_id}, "
                    f"User: {request.user.email} (ID: {request.user.id}), "
                    f"IP: {get_client_ip(request)}"
                )
                raise

        self.transition_engine.notify(result)

        return Response({
            'success': True,
            'data': self.serializer_class(booking).data,
            'msg': f'{booking.kind_label.capitalize()} cancelled successfully.'
        }, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        return self.put(request, *args, **kwargs)


class BookingStatusUpdateView(MarketplaceServicesMixin, APIView):
    """
    Change the status of a booking (admin).

    Request body: {"status": "confirmed" | "cancelled" | "completed"}

    Requesting the current status changes nothing and sends no email.

    Error responses:
    - 400: Invalid status value or transition not allowed
    - 401: Missing or invalid token
    - 403: Not an administrator
    - 404: Booking not found
    """
    permission_classes = [IsAdmin]
    model = None
    serializer_class = None

    def put(self, request, *args, **kwargs):
        serializer = BookingStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            booking = get_object_or_404(
                self.model.objects.select_for_update().select_related('vehicle', 'account'),
                pk=kwargs.get('pk')
            )
            result = self.transition_engine.transition(
                booking,
                serializer.validated_data['status'],
                request.user
            )

        self.transition_engine.notify(result)

        if result.changed:
            msg = f'{booking.kind_label.capitalize()} status updated to {result.new_status}.'
        else:
            msg = f'{booking.kind_label.capitalize()} is already {result.new_status}.'

        return Response({
            'success': True,
            'data': self.serializer_class(booking).data,
            'msg': msg
        }, status=status.HTTP_200_OK)


class BookingStatusStatsView(APIView):
    """
    Number of bookings per status, zeros included (admin).

    Success response (200):
    {"success": true, "data": {"pending": 2, "confirmed": 1, "cancelled": 0, "completed": 0}}
    """
    permission_classes = [IsAdmin]
    model = None

    def get(self, request, *args, **kwargs):
        counts = {value: 0 for value in BookingStatus.values}

        for row in self.model.objects.values('status').annotate(count=Count('id')):
            counts[row['status']] = row['count']

        return Response({'success': True, 'data': counts}, status=status.HTTP_200_OK)


class ReservationCreateView(BookingCreateView):
    """POST /api/reservations (vehicle must be listed for rent)"""
    create_serializer_class = ReservationCreateSerializer
    serializer_class = ReservationSerializer


class MyReservationsView(MyBookingsView):
    """GET /api/reservations/my"""
    model = Reservation
    serializer_class = ReservationSerializer


class ReservationDetailView(BookingDetailView):
    """GET /api/reservations/<id>"""
    model = Reservation
    serializer_class = ReservationSerializer


class ReservationCancelView(BookingCancelView):
    """PUT /api/reservations/<id>/cancel"""
    model = Reservation
    serializer_class = ReservationSerializer


class ReservationStatusUpdateView(BookingStatusUpdateView):
    """PUT /api/reservations/<id>/status"""
    model = Reservation
    serializer_class = ReservationSerializer


class ReservationStatusStatsView(BookingStatusStatsView):
    """GET /api/reservations/stats/status"""
    model = Reservation


class TestDriveCreateView(BookingCreateView):
    """POST /api/testdrives"""
    create_serializer_class = TestDriveCreateSerializer
    serializer_class = TestDriveSerializer


class MyTestDrivesView(MyBookingsView):
    """GET /api/testdrives/my"""
    model = TestDrive
    serializer_class = TestDriveSerializer


class TestDriveDetailView(BookingDetailView):
    """GET /api/testdrives/<id>"""
    model = TestDrive
    serializer_class = TestDriveSerializer


class TestDriveCancelView(BookingCancelView):
    """PUT /api/testdrives/<id>/cancel"""
    model = TestDrive
    serializer_class = TestDriveSerializer


class TestDriveStatusUpdateView(BookingStatusUpdateView):
    """PUT /api/testdrives/<id>/status"""
    model = TestDrive
    serializer_class = TestDriveSerializer


class TestDriveStatusStatsView(BookingStatusStatsView):
    """GET /api/testdrives/stats/status"""
    model = TestDrive
