"""
ASGI config for the Django application.

This file exposes the ASGI callable as a module-level variable named
`application`. It routes two protocols:

- HTTP requests to Django (REST API, health check, schema)
- WebSocket connections on ws/chat/ to ChatConsumer via Django Channels

The websocket stack authenticates the handshake once (JWTAuthMiddleware)
before the consumer runs; the consumer refuses unauthenticated connections
with close code 4001.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Django must be set up before consumers and models are imported
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.security.websocket import AllowedHostsOriginValidator  # noqa: E402

from chat.middleware import JWTAuthMiddleware  # noqa: E402
from chat.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter(
    {
        "http": django_asgi_app,
        # Origin check -> credential verification -> ws/chat/ consumer
        "websocket": AllowedHostsOriginValidator(
            JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
        ),
    }
)
