"""
Tests for favorites through both entry points.

Test Coverage:
- Toggle endpoint adds then removes
- /api/favorites stores one record and answers 409 on a duplicate
- Both entry points share the same store
- Unknown vehicles and missing favorites
"""

import pytest
from django.urls import reverse
from rest_framework import status

from core.models import Favorite


@pytest.mark.django_db
class TestFavoriteToggle:
    """Test POST /api/users/favorites/toggle and GET /api/users/favorites."""

    def test_toggle_on_and_off(self, user_client, user, rental_vehicle):
        added = user_client.post(
            reverse('user_favorite_toggle'), {'vehicleId': rental_vehicle.id}, format='json'
        )
        removed = user_client.post(
            reverse('user_favorite_toggle'), {'vehicleId': rental_vehicle.id}, format='json'
        )

        assert added.status_code == status.HTTP_200_OK
        assert added.data['data'] == [rental_vehicle.id]
        assert removed.status_code == status.HTTP_200_OK
        assert removed.data['data'] == []
        assert Favorite.objects.filter(account=user).count() == 0

    def test_toggle_unknown_vehicle(self, user_client):
        response = user_client.post(reverse('user_favorite_toggle'), {'vehicleId': 9999}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_toggle_requires_vehicle_id(self, user_client):
        response = user_client.post(reverse('user_favorite_toggle'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'vehicleId' in response.data['error']

    def test_list_favorite_vehicles(self, user_client, rental_vehicle, sale_vehicle):
        user_client.post(reverse('user_favorite_toggle'), {'vehicleId': rental_vehicle.id}, format='json')
        user_client.post(reverse('user_favorite_toggle'), {'vehicleId': sale_vehicle.id}, format='json')

        response = user_client.get(reverse('user_favorites'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert [item['id'] for item in response.data['data']] == [rental_vehicle.id, sale_vehicle.id]

    def test_favorites_are_per_account(self, user_client, other_user_client, rental_vehicle):
        user_client.post(reverse('user_favorite_toggle'), {'vehicleId': rental_vehicle.id}, format='json')

        response = other_user_client.get(reverse('user_favorites'))

        assert response.data['count'] == 0


@pytest.mark.django_db
class TestFavoriteRecords:
    """Test /api/favorites and /api/favorites/<vehicle_id>."""

    def test_add_twice_conflicts(self, user_client, user, rental_vehicle):
        first = user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')
        second = user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert first.data['data']['vehicle']['id'] == rental_vehicle.id
        assert second.status_code == status.HTTP_409_CONFLICT
        assert second.data == {'success': False, 'msg': 'This vehicle is already in your favorites.'}
        assert Favorite.objects.filter(account=user, vehicle=rental_vehicle).count() == 1

    def test_toggle_removes_record_created_by_post(self, user_client, user, rental_vehicle):
        user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        response = user_client.post(
            reverse('user_favorite_toggle'), {'vehicleId': rental_vehicle.id}, format='json'
        )

        assert response.data['data'] == []
        assert not Favorite.objects.filter(account=user).exists()

    def test_list_records(self, user_client, rental_vehicle):
        user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        response = user_client.get(reverse('favorite_list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['data'][0]['vehicle']['name'] == rental_vehicle.name

    def test_delete_record(self, user_client, rental_vehicle):
        user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        first = user_client.delete(reverse('favorite_delete', kwargs={'vehicle_id': rental_vehicle.id}))
        second = user_client.delete(reverse('favorite_delete', kwargs={'vehicle_id': rental_vehicle.id}))

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_404_NOT_FOUND

    def test_deleted_vehicle_leaves_favorites(self, user_client, user, rental_vehicle):
        user_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        rental_vehicle.delete()

        assert user.favorite_ids() == []

    def test_requires_authentication(self, api_client, rental_vehicle):
        response = api_client.post(reverse('favorite_list'), {'vehicleId': rental_vehicle.id}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
