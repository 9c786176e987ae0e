"""
Error types and the unified API exception handler.

Views raise DRF exceptions or :class:`ApiError`; the handler renders
every failure with the same envelope the front-end expects::

    {"success": false, "error": {"message": "...", "statusCode": 400}}
"""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class ApiError(APIException):
    """An operational error with an explicit HTTP status."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request'
    default_code = 'api_error'

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(detail=message)


class BookingRejected(ApiError):
    """Booking refused because of leave, capacity or missing input."""
    default_code = 'booking_rejected'


def _message_from(data) -> str | dict | list:
    if isinstance(data, dict):
        if 'detail' in data and len(data) == 1:
            return str(data['detail'])
        return data
    if isinstance(data, list) and len(data) == 1:
        return str(data[0])
    return data


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    request = context.get('request')
    path = getattr(request, 'path', '')
    method = getattr(request, 'method', '')
    if resp is None:
        logger.exception('500 - %s - %s %s', exc, method, path)
        return Response(
            {'success': False, 'error': {'message': 'Internal Server Error', 'statusCode': 500}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    message = _message_from(resp.data)
    logger.warning('%s - %s - %s %s', resp.status_code, message, method, path)
    resp.data = {'success': False, 'error': {'message': message, 'statusCode': resp.status_code}}
    return resp
