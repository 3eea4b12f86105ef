"""
Tests for vehicle image storage.

Test Coverage:
- http(s) URLs kept as they are
- base64 data URIs decoded, verified with Pillow and stored
- Invalid payloads rejected with a validation error
- Placeholder when nothing is stored
"""

import base64
import io
import os
from unittest.mock import MagicMock

import pytest
from django.core.files.storage import FileSystemStorage
from django.urls import reverse
from PIL import Image
from rest_framework import status
from rest_framework.exceptions import ValidationError

from core.conf import MarketplaceConfig
from core.media import MediaStore


def png_data_uri(size=(4, 4)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(200, 30, 30)).save(buffer, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buffer.getvalue()).decode('ascii')


@pytest.fixture
def config():
    return MarketplaceConfig.from_settings()


@pytest.fixture
def storage(tmp_path):
    return FileSystemStorage(location=str(tmp_path), base_url='/media/')


@pytest.fixture
def media_store(config, storage):
    return MediaStore(config, storage=storage)


class TestMediaStore:
    """Test MediaStore.store_images."""

    def test_urls_pass_through(self, media_store):
        urls = ['https://cdn.example.com/a.jpg', 'http://cdn.example.com/b.png']

        assert media_store.store_images(urls) == urls

    def test_empty_list_gives_placeholder(self, media_store, config):
        assert media_store.store_images([]) == [config.placeholder_image_url]
        assert media_store.store_images(None) == [config.placeholder_image_url]

    def test_data_uri_stored(self, media_store, config, tmp_path):
        [url] = media_store.store_images([png_data_uri()])

        assert url.startswith(f'{config.media_base_url}/media/vehicle_images/')
        assert url.endswith('.png')

        stored_name = url.rsplit('/', 1)[1]
        assert os.path.exists(tmp_path / 'vehicle_images' / stored_name)

    def test_invalid_base64_rejected(self, media_store):
        with pytest.raises(ValidationError) as excinfo:
            media_store.store_images(['data:image/png;base64,@@not-base64@@'])

        assert 'images' in excinfo.value.detail

    def test_non_image_bytes_rejected(self, media_store):
        payload = 'data:image/png;base64,' + base64.b64encode(b'plain text, not pixels').decode('ascii')

        with pytest.raises(ValidationError):
            media_store.store_images([payload])

    def test_unknown_scheme_rejected(self, media_store):
        with pytest.raises(ValidationError):
            media_store.store_images(['ftp://example.com/car.jpg'])

    def test_invalid_payload_writes_nothing(self, media_store, tmp_path):
        with pytest.raises(ValidationError):
            media_store.store_images([png_data_uri(), 'data:image/png;base64,@@@'])

        assert not (tmp_path / 'vehicle_images').exists()
        assert media_store.saved_names == []

    def test_discard_saved_removes_files(self, media_store, tmp_path):
        media_store.store_images([png_data_uri(), png_data_uri()])
        assert len(os.listdir(tmp_path / 'vehicle_images')) == 2

        media_store.discard_saved()

        assert os.listdir(tmp_path / 'vehicle_images') == []
        assert media_store.saved_names == []

    def test_storage_failure_falls_back_to_placeholder(self, config):
        broken_storage = MagicMock()
        broken_storage.save.side_effect = OSError('disk full')
        store = MediaStore(config, storage=broken_storage)

        assert store.store_images([png_data_uri()]) == [config.placeholder_image_url]

    def test_storage_failure_keeps_other_images(self, config):
        broken_storage = MagicMock()
        broken_storage.save.side_effect = OSError('disk full')
        store = MediaStore(config, storage=broken_storage)

        urls = store.store_images([png_data_uri(), 'https://cdn.example.com/a.jpg'])

        assert urls == ['https://cdn.example.com/a.jpg']


@pytest.mark.django_db
class TestVehicleImageUpload:
    """Test image payloads sent to the vehicle endpoints."""

    def test_invalid_image_payload(self, admin_client):
        response = admin_client.post(
            reverse('vehicle_list'),
            {
                'name': 'Broken Upload',
                'type': 'buy',
                'brand': 'Fiat',
                'model': 'Panda',
                'year': 2015,
                'mileage': 120000,
                'fuel': 'petrol',
                'price': '3500.00',
                'description': 'Runs fine.',
                'images': ['data:image/png;base64,@@@'],
            },
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'images' in response.data['error']

    def test_rejected_vehicle_leaves_no_stored_image(self, admin_client, settings, tmp_path):
        settings.MEDIA_ROOT = str(tmp_path)

        response = admin_client.post(
            reverse('vehicle_list'),
            {
                'name': 'Missing Rate',
                'type': 'rent',
                'brand': 'Kia',
                'model': 'Picanto',
                'year': 2020,
                'fuel': 'petrol',
                'passengers': 4,
                'description': 'Daily rate forgotten.',
                'images': [png_data_uri()],
            },
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'dailyRate' in response.data['error']
        upload_dir = tmp_path / 'vehicle_images'
        assert not upload_dir.exists() or os.listdir(upload_dir) == []
