"""
Authentication views: registration, login, profile and JWT lifecycle.

These are kept apart from ``clinic.authentication`` so that Django REST
framework can import the authentication class during initialisation
without pulling in views, serializers and services.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from clinic.authentication import issue_tokens
from clinic.exceptions import ApiError
from clinic.models import User
from clinic.responses import created, ok
from clinic.serializers.auth import LoginSerializer, ProfileUpdateSerializer, RegisterSerializer
from clinic.services.audit import log_action
from clinic.services.hospitals import ensure_email_free, format_user, register_hospital

logger = logging.getLogger(__name__)


def profile_cache_key(user_id) -> str:
    return f"user:{user_id}"


def _token_payload(user, **extra) -> dict:
    refresh = issue_tokens(user)
    return {'user': format_user(user), 'token': str(refresh.access_token), 'refresh': str(refresh), **extra}


# ---------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    Register a user.  An ``admin`` with a ``hospitalName`` registers a
    whole hospital together with its initial doctors and staff; anyone
    else may only register as a patient.
    """
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    if vd['role'] == User.ROLE_ADMIN and vd.get('hospitalName'):
        admin, hospital, credentials = register_hospital(
            name=vd.get('name'),
            email=vd['email'],
            password=vd['password'],
            hospital_name=vd['hospitalName'],
            hospital_phone=vd.get('hospitalPhone'),
            doctors=vd.get('doctors'),
            staff=vd.get('staff'),
        )
        log_action(user=admin, action='register_hospital', object_type='hospital', object_id=hospital.id,
                   detail={'onboarded': len(credentials), 'ip': request.META.get('REMOTE_ADDR')})
        return created(_token_payload(admin, generatedCredentials=credentials))

    ensure_email_free(vd['email'])
    user = User.objects.create_user(email=vd['email'], password=vd['password'], name=vd.get('name') or '',
                                    role=User.ROLE_PATIENT)
    log_action(user=user, action='register', object_type='user', object_id=user.id)
    logger.info('Registered patient account %s', user.email)
    return created(_token_payload(user))


# ---------------------------------------------------------------------
# Email/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    email = s.validated_data['email']
    password = s.validated_data['password']

    user = User.objects.filter(email=email).first()
    if not user or not user.check_password(password):
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'email': email, 'ip': request.META.get('REMOTE_ADDR')})
        raise AuthenticationFailed('Invalid credentials')
    if not user.is_active:
        raise AuthenticationFailed('Account is deactivated')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': request.META.get('REMOTE_ADDR')})
    cache.delete(profile_cache_key(user.id))
    return ok(_token_payload(user))

# DRF ScopedRateThrottle reads throttle_scope from the view class
login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    user = request.user
    key = profile_cache_key(user.id)
    if request.method == 'GET':
        data = cache.get(key)
        if data is None:
            data = format_user(user)
            cache.set(key, data, settings.CACHE_TTL)
        return ok(data)

    s = ProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    fields = {'name': 'name', 'experience': 'experience',
              'profileImage': 'profile_image', 'hospitalImage': 'hospital_image'}
    changed = []
    for key_in, attr in fields.items():
        if key_in in s.validated_data:
            setattr(user, attr, s.validated_data[key_in])
            changed.append(attr)
    if changed:
        user.save(update_fields=changed + ['updated_at'])
    cache.delete(key)
    return ok(format_user(user), 'Profile updated successfully')


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    resp = TokenRefreshView.as_view()(request._request)
    if resp.status_code != 200:
        raise AuthenticationFailed('Invalid token')
    data = dict(resp.data)
    return ok({'token': data.pop('access'), **data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or all of the user's outstanding ones."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            token = RefreshToken(refresh)
        except TokenError:
            raise ValidationError({'refresh': 'Invalid refresh token'})
        if str(token.get(jwt_settings.USER_ID_CLAIM)) != str(request.user.id):
            raise ApiError('Refresh token does not belong to this user', 403)
        token.blacklist()
        count = 1
    else:
        for outstanding in OutstandingToken.objects.filter(user=request.user):
            _, was_created = BlacklistedToken.objects.get_or_create(token=outstanding)
            count += int(was_created)
    cache.delete(profile_cache_key(request.user.id))
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return ok({'blacklisted': count}, 'Logged out successfully')
