"""
WebSocket helpers shared by the realtime tests.

Usage:
    communicator = await open_socket(ws_app, alice_token)
    event = await communicator.receive_json_from()
"""

from channels.testing import WebsocketCommunicator
from django.conf import settings

WS_PATH = "/ws/chat/"


def make_communicator(application, token=None, via="cookie"):
    """
    Build a communicator for ws/chat/.

    Args:
        application: ASGI application under test
        token: Credential to present (None for no credential)
        via: "cookie" or "query"
    """
    path = WS_PATH
    headers = []
    if token is not None and via == "cookie":
        headers.append(
            (b"cookie", f"{settings.CHAT_AUTH_COOKIE_NAME}={token}".encode())
        )
    elif token is not None and via == "query":
        path = f"{WS_PATH}?token={token}"
    return WebsocketCommunicator(application, path, headers=headers)


async def open_socket(application, token, via="cookie"):
    """Connect an authenticated communicator and assert it was accepted."""
    communicator = make_communicator(application, token, via=via)
    connected, _ = await communicator.connect()
    assert connected
    return communicator


async def expect_event(communicator, event_type, timeout=1):
    """Receive the next frame and assert its type."""
    event = await communicator.receive_json_from(timeout=timeout)
    assert event["type"] == event_type, event
    return event
