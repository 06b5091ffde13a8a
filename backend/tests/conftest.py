import os
import sys
import pytest

# Ensure the backend root (containing the `redlight` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from redlight import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    # Red shows up immediately; timers run inline under TESTING
    ARM_DELAY_MIN_SEC = 0.0
    ARM_DELAY_MAX_SEC = 0.0
    ROOM_CODE_LENGTH = 5
    HOST_DISPLAY_NAME = 'Host'
    PLAYER_NAME_MAX_LEN = 24
    LOG_LEVEL = 'DEBUG'


class FakeClock:
    """Monotonic clock stand-in, in seconds."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def gateway(flask_app):
    return flask_app.extensions['redlight']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def connect(flask_app):
    """Factory for connected Socket.IO test clients, disconnected on teardown."""
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        test_client.get_received()  # flush
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def clock():
    return FakeClock()


def payloads(received, event):
    """Events of one name from a get_received() batch, as their first arg (or None)."""
    return [pkt['args'][0] if pkt['args'] else None for pkt in received if pkt['name'] == event]
