"""
Unit Tests for the notification WebSocket
"""
import pytest
from fastapi.testclient import TestClient

from taskportal.main import app
from taskportal.services.presence import PresenceRegistry


@pytest.fixture
def ws_client(presence: PresenceRegistry):
    # Not used as a context manager, so the lifespan (and its database setup) is skipped
    app.state.presence = presence
    client = TestClient(app)
    yield client
    presence.clear()


class TestNotificationSocket:

    def test_join_registers_presence(self, ws_client, presence):
        with ws_client.websocket_connect('/api/v1/ws') as websocket:
            websocket.send_json({'type': 'join', 'userId': 'user-1'})
            ack = websocket.receive_json()

            assert ack['type'] == 'joined'
            assert ack['data'] == {'userId': 'user-1'}
            assert 'user-1' in presence

        assert 'user-1' not in presence

    def test_non_join_frames_ignored(self, ws_client, presence):
        with ws_client.websocket_connect('/api/v1/ws') as websocket:
            websocket.send_text('not json')
            websocket.send_json({'type': 'typing'})
            websocket.send_json({'type': 'join'})
            websocket.send_json({'type': 'join', 'userId': 'user-2'})

            assert websocket.receive_json()['data'] == {'userId': 'user-2'}
            assert presence.online_user_ids() == ['user-2']

    def test_binary_frames_ignored(self, ws_client, presence):
        with ws_client.websocket_connect('/api/v1/ws') as websocket:
            websocket.send_json({'type': 'join', 'userId': 'user-4'})
            websocket.receive_json()

            websocket.send_bytes(b'\x00\x01')
            assert 'user-4' in presence

            websocket.send_json({'type': 'join', 'userId': 'user-4'})
            assert websocket.receive_json()['type'] == 'joined'
            assert 'user-4' in presence

        assert 'user-4' not in presence

    def test_rejoin_moves_identity(self, ws_client, presence):
        with ws_client.websocket_connect('/api/v1/ws') as websocket:
            websocket.send_json({'type': 'join', 'userId': 'first'})
            websocket.receive_json()
            websocket.send_json({'type': 'join', 'userId': 'second'})
            websocket.receive_json()

            assert presence.online_user_ids() == ['second']

    def test_newer_session_survives_older_disconnect(self, ws_client, presence):
        older_session = ws_client.websocket_connect('/api/v1/ws')
        older = older_session.__enter__()
        older.send_json({'type': 'join', 'userId': 'user-3'})
        older.receive_json()

        with ws_client.websocket_connect('/api/v1/ws') as newer:
            newer.send_json({'type': 'join', 'userId': 'user-3'})
            newer.receive_json()

            older_session.__exit__(None, None, None)

            assert 'user-3' in presence
            newer.send_json({'type': 'join', 'userId': 'user-3'})
            assert newer.receive_json()['type'] == 'joined'

        assert 'user-3' not in presence
