"""
Tests for bearer token issuing, verification and the access guard.

Test Coverage:
- Issued tokens carry the account id and an expiry
- Expired, malformed and wrongly signed tokens are rejected with distinct messages
- Missing token, deleted account and disabled account
- Role gate: anonymous (401) vs wrong role (403)
"""

from datetime import datetime, timedelta, timezone as dt_timezone

import jwt
import pytest
from django.conf import settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from core.exceptions import TokenExpired, TokenMalformed, TokenUnverifiable
from core.tokens import decode_token, issue_token, verify_token


def encode_claims(claims, key=None):
    return jwt.encode(
        claims,
        key or settings.SIMPLE_JWT['SIGNING_KEY'],
        algorithm=settings.SIMPLE_JWT['ALGORITHM']
    )


def access_claims(account_id, expires_in=timedelta(hours=1)):
    now = datetime.now(dt_timezone.utc)
    return {
        'token_type': 'access',
        'user_id': account_id,
        'jti': 'test-jti',
        'iat': now,
        'exp': now + expires_in,
    }


# ============================================================================
# Token Issuer/Verifier
# ============================================================================

@pytest.mark.django_db
class TestTokenVerification:
    """Test issuing and verifying tokens directly."""

    def test_issued_token_carries_account_id(self, user):
        token = issue_token(user)

        assert str(verify_token(token)) == str(user.id)

    def test_issued_token_has_configured_expiry(self, user):
        claims = decode_token(issue_token(user))

        lifetime = settings.SIMPLE_JWT['ACCESS_TOKEN_LIFETIME']
        remaining = claims['exp'] - datetime.now(dt_timezone.utc).timestamp()
        assert abs(remaining - lifetime.total_seconds()) <= 5

    def test_expired_token_rejected(self, user):
        token = encode_claims(access_claims(user.id, expires_in=timedelta(seconds=-10)))

        with pytest.raises(TokenExpired):
            decode_token(token)

    def test_malformed_token_rejected(self):
        with pytest.raises(TokenMalformed):
            decode_token('definitely-not-a-jwt')

    def test_wrong_signature_rejected(self, user):
        token = encode_claims(
            access_claims(user.id),
            key='another-signing-key-that-is-long-enough-for-hs256'
        )

        with pytest.raises(TokenUnverifiable):
            decode_token(token)

    def test_tampered_payload_rejected(self, user, other_user):
        header, _, signature = issue_token(user).split('.')
        forged_payload = encode_claims(access_claims(other_user.id)).split('.')[1]

        with pytest.raises(TokenUnverifiable):
            decode_token(f'{header}.{forged_payload}.{signature}')

    def test_wrong_token_type_rejected(self, user):
        claims = access_claims(user.id)
        claims['token_type'] = 'refresh'

        with pytest.raises(TokenUnverifiable):
            decode_token(encode_claims(claims))

    def test_missing_identity_rejected(self, user):
        claims = access_claims(user.id)
        del claims['user_id']

        with pytest.raises(TokenUnverifiable):
            decode_token(encode_claims(claims))

    def test_token_errors_are_authentication_failures(self):
        assert issubclass(TokenExpired, AuthenticationFailed)
        assert issubclass(TokenMalformed, AuthenticationFailed)
        assert issubclass(TokenUnverifiable, AuthenticationFailed)


# ============================================================================
# Access Guard
# ============================================================================

@pytest.mark.django_db
class TestAccessGuard:
    """Test the guard in front of protected endpoints."""

    def test_no_token(self, api_client):
        response = api_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data == {'success': False, 'msg': 'Not authorized, no token'}

    def test_valid_token(self, user_client, user):
        response = user_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['data']['email'] == user.email
        assert response.data['data']['role'] == 'user'
        assert 'password' not in response.data['data']

    def test_expired_token(self, api_client, user):
        token = encode_claims(access_claims(user.id, expires_in=timedelta(seconds=-10)))
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['msg'] == 'Not authorized, token expired'

    def test_malformed_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer garbage')

        response = api_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['msg'] == 'Not authorized, token malformed'

    def test_wrong_signature(self, api_client, user):
        token = encode_claims(
            access_claims(user.id),
            key='another-signing-key-that-is-long-enough-for-hs256'
        )
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['msg'] == 'Not authorized, token invalid'

    def test_deleted_account(self, user_client, user):
        user.delete()

        response = user_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['msg'] == 'User associated with this token was not found'

    def test_disabled_account(self, user_client, user):
        user.is_active = False
        user.save()

        response = user_client.get(reverse('auth_me'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['msg'] == 'Not authorized, account disabled'

    def test_admin_route_anonymous(self, api_client):
        response = api_client.get(reverse('user_list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['msg'] == 'Not authorized, no token'

    def test_admin_route_wrong_role(self, user_client):
        response = user_client.get(reverse('user_list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['msg'] == 'Not authorized to access this route.'

    def test_admin_route_admin(self, admin_client, user):
        response = admin_client.get(reverse('user_list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2

    def test_role_change_applies_to_existing_token(self, user_client, user):
        """The role is read from the account on every request, not from the token."""
        user.role = 'admin'
        user.save()

        response = user_client.get(reverse('user_list'))

        assert response.status_code == status.HTTP_200_OK
