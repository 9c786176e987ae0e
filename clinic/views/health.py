import logging

from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone

logger = logging.getLogger(__name__)


def health(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({
            'status': 'ok',
            'timestamp': timezone.now().isoformat(),
            'database': 'connected' if row and row[0] == 1 else 'unknown',
        })
    except DatabaseError as e:
        logger.error('Health check failed: %s', e)
        return JsonResponse({
            'status': 'error',
            'timestamp': timezone.now().isoformat(),
            'database': 'disconnected',
        }, status=500)
