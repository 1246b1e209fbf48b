from django.http import JsonResponse
from django.db import connection
from django.core.cache import cache


def health_check(request):
    status = {"db": "unknown", "cache": "unknown"}
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        status["db"] = "ok"

        # django-redis in production, locmem otherwise
        cache.set("health-check", "ok", timeout=5)
        status["cache"] = "ok" if cache.get("health-check") == "ok" else "degraded"

        return JsonResponse({"status": "ok", "components": status}, status=200)
    except Exception as e:
        return JsonResponse(
            {"status": "error", "detail": str(e), "components": status},
            status=503
        )
