"""
Custom validators for the marketplace models.
"""

from django.core.exceptions import ValidationError
from django.utils import timezone


def max_vehicle_year():
    """Latest accepted model year (upcoming models are listed up to two years ahead)."""
    return timezone.now().year + 2


def validate_vehicle_year(value):
    """
    Validate a vehicle model year.

    Args:
        value: Model year

    Raises:
        ValidationError: If the year is before 1900 or too far in the future
    """
    if value is None:
        return

    if value < 1900:
        raise ValidationError(
            'Year must be 1900 or later.',
            code='year_too_old'
        )

    if value > max_vehicle_year():
        raise ValidationError(
            f'Year cannot be later than {max_vehicle_year()}.',
            code='year_too_far'
        )


def validate_image_urls(value):
    """
    Validate the stored image list of a vehicle.

    Images are uploaded by the media store before the vehicle is saved, so
    only absolute http(s) URLs may reach the database.

    Args:
        value: List of image URLs

    Raises:
        ValidationError: If the list is empty or holds a non-URL entry
    """
    if not isinstance(value, list) or not value:
        raise ValidationError(
            'At least one image is required for the vehicle.',
            code='images_required'
        )

    for url in value:
        if not isinstance(url, str) or not url.startswith('http'):
            raise ValidationError(
                'Please provide a list of valid image URLs.',
                code='invalid_image_url'
            )


def validate_specs(value):
    """
    Validate free-form vehicle specifications (string keys to string values).

    Raises:
        ValidationError: If specs is not a flat mapping of strings
    """
    if value in (None, {}):
        return

    if not isinstance(value, dict):
        raise ValidationError(
            'Specs must be an object of key/value pairs.',
            code='invalid_specs'
        )

    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ValidationError(
                'Spec keys and values must be strings.',
                code='invalid_spec_entry'
            )
