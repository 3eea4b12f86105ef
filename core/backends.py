"""
Authentication backend for email-identified accounts.
"""

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

Account = get_user_model()


class EmailBackend(ModelBackend):
    """
    Authenticates an account by email (case-insensitive) and password.

    Unknown emails, wrong passwords and disabled accounts all return None so
    the caller cannot tell them apart.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        """
        Authenticate an account.

        Args:
            request: HTTP request object
            username: Email address (named username for compatibility)
            password: Raw password
            **kwargs: May carry ``email`` instead of ``username``

        Returns:
            Account if authentication succeeded, None otherwise
        """
        email = kwargs.get('email', username)

        if email is None or password is None:
            return None

        try:
            account = Account.objects.get(email__iexact=email.strip())
        except Account.DoesNotExist:
            # Hash once anyway so unknown emails take as long as wrong passwords
            Account().set_password(password)
            return None

        if account.check_password(password) and self.user_can_authenticate(account):
            return account

        return None
