"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the chat domain but are
essential for application infrastructure, such as health checks.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for monitoring and orchestration.

    Returns:
        JsonResponse with status and component health:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "disconnected"
        - channel_layer: "connected", "disconnected" or "unconfigured"

    HTTP Status Codes:
        200: All systems operational
        503: Database or channel layer unreachable

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "channel_layer": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "channel_layer": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        logger.exception("Health check: database unreachable")
        health_status["database"] = "disconnected"
        is_healthy = False

    # Realtime delivery is dead without the channel layer, so it is critical
    channel_layer = get_channel_layer()
    if channel_layer is None:
        health_status["channel_layer"] = "unconfigured"
        is_healthy = False
    else:
        try:
            async_to_sync(channel_layer.group_send)(
                "health", {"type": "health.check"}
            )
            health_status["channel_layer"] = "connected"
        except Exception:
            logger.exception("Health check: channel layer unreachable")
            health_status["channel_layer"] = "disconnected"
            is_healthy = False

    if not is_healthy:
        health_status["status"] = "unhealthy"

    return JsonResponse(health_status, status=200 if is_healthy else 503)
