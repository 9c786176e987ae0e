"""
Custom authentication backend for bearer JWT auth.

This module defines a subclass of Simple JWT's ``JWTAuthentication``
that additionally rejects deactivated accounts.  Keeping it separate
from any view definitions avoids circular import issues when the REST
framework imports authentication classes during initialization.
"""
from __future__ import annotations

from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt import authentication
from rest_framework_simplejwt.tokens import RefreshToken


class JWTAuthentication(authentication.JWTAuthentication):
    """Bearer token authentication using the ``Authorization`` header.

    Simple JWT already refuses inactive users; this subclass exists to
    provide a stable import path for the project's configuration and to
    return the front-end's wording.
    """

    def get_user(self, validated_token):
        try:
            return super().get_user(validated_token)
        except AuthenticationFailed as exc:
            if getattr(exc.detail, 'code', None) == 'user_inactive':
                raise AuthenticationFailed('Account is deactivated')
            raise AuthenticationFailed('Invalid token')


def issue_tokens(user) -> RefreshToken:
    """Return a refresh token for ``user`` carrying the role and hospital claims.

    The access token derived from it inherits the same claims.
    """
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    refresh['hospitalId'] = str(user.hospital_id) if user.hospital_id else None
    refresh['hospitalName'] = user.hospital_name or None
    return refresh
