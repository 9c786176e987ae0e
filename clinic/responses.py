"""
Success envelope shared by all API views.

Errors are rendered by :func:`clinic.exceptions.api_exception_handler`;
successful calls return ``{"success": true, "data": ..., "message": ...}``.
"""
from rest_framework import status as http_status
from rest_framework.response import Response


def ok(data=None, message: str | None = None, status: int = http_status.HTTP_200_OK) -> Response:
    payload = {'success': True}
    if data is not None:
        payload['data'] = data
    if message:
        payload['message'] = message
    return Response(payload, status=status)


def created(data=None, message: str | None = None) -> Response:
    return ok(data, message, status=http_status.HTTP_201_CREATED)


def current_user(request):
    """Authenticated user of the request, or None."""
    user = getattr(request, 'user', None)
    if user is not None and getattr(user, 'is_authenticated', False):
        return user
    return None
