"""
Issuing and verifying the bearer tokens used by the API.

Tokens are simplejwt access tokens carrying the account id and an expiry.
Verification decodes them with PyJWT directly so that each failure kind
(expired, malformed, unverifiable) maps to its own error.
"""

import jwt
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import TokenExpired, TokenMalformed, TokenUnverifiable


def issue_token(account):
    """
    Issue a signed access token for an account.

    The lifetime comes from SIMPLE_JWT['ACCESS_TOKEN_LIFETIME'].

    Args:
        account: Account instance

    Returns:
        str: Encoded JWT
    """
    return str(AccessToken.for_user(account))


def decode_token(raw_token):
    """
    Decode and verify a token, returning its claims.

    Args:
        raw_token: Encoded JWT (str or bytes)

    Returns:
        dict: Verified claims

    Raises:
        TokenExpired: The token is past its expiry
        TokenMalformed: The value is not a decodable JWT
        TokenUnverifiable: Bad signature, wrong algorithm, wrong token type
            or missing identity claim
    """
    try:
        claims = jwt.decode(
            raw_token,
            api_settings.SIGNING_KEY,
            algorithms=[api_settings.ALGORITHM],
            options={'require': ['exp']},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    # InvalidSignatureError is a DecodeError subclass
    except jwt.InvalidSignatureError:
        raise TokenUnverifiable()
    except jwt.DecodeError:
        raise TokenMalformed()
    except jwt.InvalidTokenError:
        raise TokenUnverifiable()

    if claims.get(api_settings.TOKEN_TYPE_CLAIM) != AccessToken.token_type:
        raise TokenUnverifiable()

    if claims.get(api_settings.USER_ID_CLAIM) in (None, ''):
        raise TokenUnverifiable()

    return claims


def verify_token(raw_token):
    """Verify a token and return the account id it was issued for."""
    return decode_token(raw_token)[api_settings.USER_ID_CLAIM]
