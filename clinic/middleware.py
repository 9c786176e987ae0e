from django.http import JsonResponse


class JsonNotFoundMiddleware:
    """Render unknown API routes as the JSON error envelope instead of HTML."""
    API_PREFIXES = ('/api/',)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        path = request.path or ''
        if (
            response.status_code == 404
            and any(path.startswith(p) for p in self.API_PREFIXES)
            and 'application/json' not in response.get('Content-Type', '')
        ):
            return JsonResponse(
                {'success': False, 'error': {'message': 'Route not found', 'statusCode': 404}},
                status=404,
            )
        return response
