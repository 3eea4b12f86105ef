"""
URL configuration for the vehicle_marketplace project.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path

from core.views import (
    RegisterView,
    LoginView,
    ForgotPasswordView,
    ResetPasswordView,
    MeView,
    ContactView,
    VehicleListCreateView,
    VehicleDetailView,
    VehicleAdditionStatsView,
    UserListView,
    UserDetailView,
    FavoriteToggleView,
    FavoriteVehiclesView,
    FavoriteListCreateView,
    FavoriteDeleteView,
    ReservationCreateView,
    MyReservationsView,
    ReservationDetailView,
    ReservationCancelView,
    ReservationStatusUpdateView,
    ReservationStatusStatsView,
    TestDriveCreateView,
    MyTestDrivesView,
    TestDriveDetailView,
    TestDriveCancelView,
    TestDriveStatusUpdateView,
    TestDriveStatusStatsView,
)


urlpatterns = [
    path('admin/', admin.site.urls),

    # Authentication endpoints
    path('api/auth/register', RegisterView.as_view(), name='auth_register'),
    path('api/auth/login', LoginView.as_view(), name='auth_login'),
    path('api/auth/forgotpassword', ForgotPasswordView.as_view(), name='auth_forgot_password'),
    path('api/auth/resetpassword/<str:token>', ResetPasswordView.as_view(), name='auth_reset_password'),
    path('api/auth/me', MeView.as_view(), name='auth_me'),
    path('api/auth/contact', ContactView.as_view(), name='auth_contact'),

    # Vehicle endpoints
    path('api/vehicles', VehicleListCreateView.as_view(), name='vehicle_list'),
    path('api/vehicles/stats/additions', VehicleAdditionStatsView.as_view(), name='vehicle_addition_stats'),
    path('api/vehicles/<int:pk>', VehicleDetailView.as_view(), name='vehicle_detail'),

    # User administration and favorites
    path('api/users', UserListView.as_view(), name='user_list'),
    path('api/users/favorites/toggle', FavoriteToggleView.as_view(), name='user_favorite_toggle'),
    path('api/users/favorites', FavoriteVehiclesView.as_view(), name='user_favorites'),
    path('api/users/<int:pk>', UserDetailView.as_view(), name='user_detail'),

    # Favorite records
    path('api/favorites', FavoriteListCreateView.as_view(), name='favorite_list'),
    path('api/favorites/<int:vehicle_id>', FavoriteDeleteView.as_view(), name='favorite_delete'),

    # Reservation endpoints
    path('api/reservations', ReservationCreateView.as_view(), name='reservation_create'),
    path('api/reservations/my', MyReservationsView.as_view(), name='reservation_my'),
    path('api/reservations/stats/status', ReservationStatusStatsView.as_view(), name='reservation_status_stats'),
    path('api/reservations/<int:pk>', ReservationDetailView.as_view(), name='reservation_detail'),
    path('api/reservations/<int:pk>/cancel', ReservationCancelView.as_view(), name='reservation_cancel'),
    path('api/reservations/<int:pk>/status', ReservationStatusUpdateView.as_view(), name='reservation_status'),

    # Test drive endpoints
    path('api/testdrives', TestDriveCreateView.as_view(), name='testdrive_create'),
    path('api/testdrives/my', MyTestDrivesView.as_view(), name='testdrive_my'),
    path('api/testdrives/stats/status', TestDriveStatusStatsView.as_view(), name='testdrive_status_stats'),
    path('api/testdrives/<int:pk>', TestDriveDetailView.as_view(), name='testdrive_detail'),
    path('api/testdrives/<int:pk>/cancel', TestDriveCancelView.as_view(), name='testdrive_cancel'),
    path('api/testdrives/<int:pk>/status', TestDriveStatusUpdateView.as_view(), name='testdrive_status'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
