"""
Common API views
"""
from django.http import JsonResponse
from django.db import connection


def health_check(request):
    """
    Health check endpoint

    Returns:
        - 200: everything is up
        - 503: database connection failed
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "service": "exam-api",
            "database": "connected",
        }, status=200)
    except Exception as e:
        return JsonResponse({
            "status": "unhealthy",
            "service": "exam-api",
            "database": "disconnected",
            "error": str(e),
        }, status=503)
