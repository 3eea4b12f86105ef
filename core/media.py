"""
Storage of vehicle images.

Clients send either absolute http(s) URLs, kept as they are, or inline
``data:image/<format>;base64,<data>`` payloads, which are decoded, checked
with Pillow and written to Django's default storage.
"""

import base64
import binascii
import io
import logging
import re
import uuid

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r'^data:image/(?P<format>[a-zA-Z0-9.+-]+);base64,(?P<data>.+)$', re.DOTALL)

# Pillow format name -> stored file extension
ALLOWED_FORMATS = {
    'JPEG': 'jpg',
    'PNG': 'png',
    'GIF': 'gif',
    'WEBP': 'webp',
}

MAX_IMAGE_SIZE = 5 * 1024 * 1024

UPLOAD_DIRECTORY = 'vehicle_images'


class MediaStore:
    """
    Turns client image payloads into stored, absolute image URLs.

    Args:
        config: MarketplaceConfig (media base URL and placeholder image)
        storage: Django storage backend (defaults to default_storage)
    """

    def __init__(self, config, storage=None):
        self.config = config
        self.storage = storage or default_storage
        # Names written by this instance, for discard_saved()
        self.saved_names = []

    def store_images(self, payloads):
        """
        Store a list of image payloads.

        Args:
            payloads: List of http(s) URLs and/or base64 data URIs

        Returns:
            list[str]: Absolute URLs, or [placeholder] when nothing was stored

        Raises:
            ValidationError: If a payload is neither a URL nor a valid image
        """
        # Every payload is validated before anything is written
        decoded = []

        for index, payload in enumerate(payloads or []):
            if not isinstance(payload, str) or not payload.strip():
                raise ValidationError({'images': [f'Image {index + 1} is empty or not a string.']})

            payload = payload.strip()

            if payload.startswith(('http://', 'https://')):
                decoded.append((index, payload))
                continue

            decoded.append((index, self.decode_data_uri(payload, index)))

        urls = []

        for index, item in decoded:
            if isinstance(item, str):
                urls.append(item)
                continue

            content, extension = item
            try:
                urls.append(self.save(content, extension))
            except OSError as e:
                logger.error(f"Failed to store vehicle image {index + 1}: {e}")

        if not urls:
            return [self.config.placeholder_image_url]

        return urls

    def decode_data_uri(self, payload, index=0):
        """
        Decode and verify a base64 image data URI.

        Returns:
            tuple: (bytes, file extension)

        Raises:
            ValidationError: If the payload is not a supported image
        """
        match = DATA_URI_PATTERN.match(payload)
        if not match:
            raise ValidationError({
                'images': [f'Image {index + 1} must be an http(s) URL or a base64 data URI.']
            })

        try:
            content = base64.b64decode(match.group('data'), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError({'images': [f'Image {index + 1} is not valid base64 data.']})

        if len(content) > MAX_IMAGE_SIZE:
            raise ValidationError({
                'images': [f'Image {index + 1} exceeds {MAX_IMAGE_SIZE // (1024 * 1024)}MB.']
            })

        try:
            with Image.open(io.BytesIO(content)) as image:
                image.verify()
                image_format = image.format
        except (UnidentifiedImageError, OSError, SyntaxError):
            raise ValidationError({'images': [f'Image {index + 1} is not a valid image.']})

        if image_format not in ALLOWED_FORMATS:
            raise ValidationError({
                'images': [
                    f'Image {index + 1} format is not supported. '
                    f'Allowed formats: {", ".join(sorted(ALLOWED_FORMATS))}.'
                ]
            })

        return content, ALLOWED_FORMATS[image_format]

    def save(self, content, extension):
        """Write image bytes to storage and return the absolute URL."""
        name = self.storage.save(
            f'{UPLOAD_DIRECTORY}/{uuid.uuid4().hex}.{extension}',
            ContentFile(content)
        )
        self.saved_names.append(name)
        url = self.storage.url(name)

        if url.startswith(('http://', 'https://')):
            return url

        return f'{self.config.media_base_url}{url}'

    def discard_saved(self):
        """
        Delete every file written by this store so far.

        Used when the vehicle the images belong to could not be saved.
        """
        for name in self.saved_names:
            try:
                self.storage.delete(name)
            except OSError as e:
                logger.error(f"Failed to remove orphaned vehicle image {name}: {e}")
            else:
                logger.info(f"Removed orphaned vehicle image {name}")
        self.saved_names = []
