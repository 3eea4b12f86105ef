"""
Tests for the password reset flow.

Test Coverage:
- Reset link emailed; only the token hash is stored
- Unknown emails get the same response and no email
- A token is accepted at most once
- A token expires exactly at the configured window
- Delivery failure clears the issued token and answers 500
"""

import re
from datetime import timedelta
from smtplib import SMTPException
from unittest.mock import patch

import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from core.accounts import PasswordResetService
from core.conf import MarketplaceConfig
from core.exceptions import InvalidOrExpiredToken, UpstreamDeliveryFailure
from core.models import hash_reset_token
from core.notifications import NotificationDispatcher

RESET_LINK_PATTERN = re.compile(r'/resetpassword/([0-9a-f]+)')


def extract_token(message):
    match = RESET_LINK_PATTERN.search(message.body)
    assert match, 'reset link missing from email'
    return match.group(1)


@pytest.fixture
def reset_service():
    config = MarketplaceConfig.from_settings()
    return PasswordResetService(config, NotificationDispatcher(config))


# ============================================================================
# Endpoints
# ============================================================================

@pytest.mark.django_db
class TestForgotPasswordEndpoint:
    """Test POST /api/auth/forgotpassword and PUT /api/auth/resetpassword/<token>."""

    def test_reset_link_emailed(self, api_client, user):
        response = api_client.post(
            reverse('auth_forgot_password'),
            {'email': 'alice@example.com'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['alice@example.com']

        raw_token = extract_token(mail.outbox[0])
        user.refresh_from_db()
        assert user.reset_password_token == hash_reset_token(raw_token)
        assert user.reset_password_token != raw_token

    def test_unknown_email_same_response(self, api_client, user):
        known = api_client.post(
            reverse('auth_forgot_password'),
            {'email': 'alice@example.com'},
            format='json'
        )
        unknown = api_client.post(
            reverse('auth_forgot_password'),
            {'email': 'nobody@example.com'},
            format='json'
        )

        assert known.status_code == unknown.status_code == status.HTTP_200_OK
        assert known.data == unknown.data
        assert len(mail.outbox) == 1

    def test_reset_password_once(self, api_client, user):
        api_client.post(reverse('auth_forgot_password'), {'email': 'alice@example.com'}, format='json')
        raw_token = extract_token(mail.outbox[0])

        first = api_client.put(
            reverse('auth_reset_password', kwargs={'token': raw_token}),
            {'password': 'brandnew123'},
            format='json'
        )
        second = api_client.put(
            reverse('auth_reset_password', kwargs={'token': raw_token}),
            {'password': 'another123'},
            format='json'
        )

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_400_BAD_REQUEST
        assert second.data == {'success': False, 'msg': 'Invalid or expired reset token.'}

        user.refresh_from_db()
        assert user.check_password('brandnew123')
        assert user.reset_password_token == ''
        assert user.reset_password_expire is None

    def test_login_with_new_password(self, api_client, user):
        api_client.post(reverse('auth_forgot_password'), {'email': 'alice@example.com'}, format='json')
        raw_token = extract_token(mail.outbox[0])
        api_client.put(
            reverse('auth_reset_password', kwargs={'token': raw_token}),
            {'password': 'brandnew123'},
            format='json'
        )

        response = api_client.post(
            reverse('auth_login'),
            {'email': 'alice@example.com', 'password': 'brandnew123'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK

    def test_unknown_token_rejected(self, api_client, user):
        response = api_client.put(
            reverse('auth_reset_password', kwargs={'token': 'deadbeef'}),
            {'password': 'brandnew123'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        user.refresh_from_db()
        assert user.check_password('secret123')

    def test_delivery_failure_clears_token(self, api_client, user):
        with patch('core.notifications.send_mail', side_effect=SMTPException('down')):
            response = api_client.post(
                reverse('auth_forgot_password'),
                {'email': 'alice@example.com'},
                format='json'
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'success': False, 'error': 'Email could not be sent'}

        user.refresh_from_db()
        assert user.reset_password_token == ''
        assert user.reset_password_expire is None


# ============================================================================
# PasswordResetService
# ============================================================================

@pytest.mark.django_db
class TestPasswordResetService:
    """Test token expiry against the configured window."""

    def test_expiry_is_ten_minutes(self, reset_service, user):
        before = timezone.now()
        reset_service.request_reset('alice@example.com')

        user.refresh_from_db()
        assert user.reset_password_expire - before >= timedelta(minutes=10)
        assert user.reset_password_expire - before < timedelta(minutes=10, seconds=5)

    def test_token_valid_just_before_expiry(self, reset_service, user):
        reset_service.request_reset('alice@example.com')
        raw_token = extract_token(mail.outbox[0])
        user.refresh_from_db()

        just_before = user.reset_password_expire - timedelta(seconds=1)
        with patch('core.accounts.timezone.now', return_value=just_before):
            account = reset_service.reset_password(raw_token, 'brandnew123')

        assert account.pk == user.pk

    def test_token_rejected_after_expiry(self, reset_service, user):
        reset_service.request_reset('alice@example.com')
        raw_token = extract_token(mail.outbox[0])
        user.refresh_from_db()

        just_after = user.reset_password_expire + timedelta(milliseconds=1)
        with patch('core.accounts.timezone.now', return_value=just_after):
            with pytest.raises(InvalidOrExpiredToken):
                reset_service.reset_password(raw_token, 'brandnew123')

        user.refresh_from_db()
        assert user.check_password('secret123')

    def test_new_request_replaces_previous_token(self, reset_service, user):
        reset_service.request_reset('alice@example.com')
        reset_service.request_reset('alice@example.com')
        first_token = extract_token(mail.outbox[0])
        second_token = extract_token(mail.outbox[1])

        with pytest.raises(InvalidOrExpiredToken):
            reset_service.reset_password(first_token, 'brandnew123')

        assert reset_service.reset_password(second_token, 'brandnew123').pk == user.pk

    def test_delivery_failure_raises(self, reset_service, user):
        with patch('core.notifications.send_mail', side_effect=SMTPException('down')):
            with pytest.raises(UpstreamDeliveryFailure):
                reset_service.request_reset('alice@example.com')

        user.refresh_from_db()
        assert user.reset_password_token == ''

    def test_reset_url_points_to_frontend(self, reset_service):
        assert reset_service.reset_url('abc') == f'{reset_service.config.frontend_url}/resetpassword/abc'
