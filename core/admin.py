"""
Django admin configuration for the marketplace models.
"""

from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm
from django.utils.translation import gettext_lazy as _

from .models import Account, Favorite, Reservation, TestDrive, Vehicle


class AccountCreationForm(UserCreationForm):
    class Meta:
        model = Account
        fields = ('email', 'role')


class AccountChangeForm(UserChangeForm):
    class Meta:
        model = Account
        fields = '__all__'


@admin.register(Account)
class AccountAdmin(BaseUserAdmin):
    """
    Admin interface for email-identified accounts.
    """

    form = AccountChangeForm
    add_form = AccountCreationForm

    list_display = ['email', 'role', 'is_active', 'is_staff', 'created_at']

    list_filter = ['role', 'is_active', 'is_staff', 'is_superuser', 'created_at']

    search_fields = ['email', 'first_name', 'last_name']

    ordering = ['-created_at']

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name')
        }),
        (_('Access'), {
            'fields': ('role', 'is_active', 'is_superuser', 'groups', 'user_permissions'),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'role', 'password1', 'password2'),
        }),
    )

    # is_staff follows the role (see Account.save)
    readonly_fields = ['created_at', 'updated_at', 'last_login', 'date_joined']

    list_per_page = 25


class VehicleAdminForm(forms.ModelForm):
    class Meta:
        model = Vehicle
        fields = '__all__'
        widgets = {
            'description': forms.Textarea(attrs={'rows': 4}),
        }


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    form = VehicleAdminForm

    list_display = ['name', 'listing_type', 'brand', 'model_name', 'year', 'fuel', 'is_featured', 'created_at']

    list_filter = ['listing_type', 'fuel', 'is_featured', 'created_at']

    search_fields = ['name', 'brand', 'model_name']

    readonly_fields = ['created_at', 'updated_at']

    raw_id_fields = ['owner']

    date_hierarchy = 'created_at'

    list_per_page = 25


class BookingAdmin(admin.ModelAdmin):
    """
    Shared configuration of the reservation and test drive admins.
    """

    list_filter = ['status', 'created_at']

    search_fields = ['account__email', 'vehicle__name', 'vehicle__brand']

    readonly_fields = ['created_at', 'updated_at']

    raw_id_fields = ['account', 'vehicle']

    list_select_related = ['account', 'vehicle']

    list_per_page = 25


@admin.register(Reservation)
class ReservationAdmin(BookingAdmin):
    list_display = ['id', 'account', 'vehicle', 'start_date', 'end_date', 'status', 'total_price', 'created_at']


@admin.register(TestDrive)
class TestDriveAdmin(BookingAdmin):
    list_display = ['id', 'account', 'vehicle', 'test_drive_date', 'status', 'created_at']


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ['id', 'account', 'vehicle', 'created_at']

    search_fields = ['account__email', 'vehicle__name']

    raw_id_fields = ['account', 'vehicle']
