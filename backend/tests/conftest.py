import os
import random
import sys

import pytest

# Ensure the backend root (containing the `guesswho` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guesswho.game.catalog import StaticPhotoCatalog
from guesswho.game.service import GameService
from guesswho.game.store import RoomStore
from guesswho.game.timers import TimerHandle
from guesswho.realtime.handlers import MessageDispatcher
from guesswho.realtime.registry import ConnectionRegistry
from guesswho.server import create_app


PHOTOS = [
    ('/photos/Alex.jpg', 'Alex'),
    ('/photos/Sarah.jpg', 'Sarah'),
    ('/photos/Mike.jpg', 'Mike'),
    ('/photos/Emma.jpg', 'Emma'),
    ('/photos/David.jpg', 'David'),
    ('/photos/Lily.jpg', 'Lily'),
]


class FakeClock:
    def __init__(self, start_ms=1_700_000_000_000):
        self.ms = start_ms

    def __call__(self):
        return self.ms


class ManualScheduler:
    """Virtual-time scheduler: nothing runs until advance() is called."""

    def __init__(self, clock):
        self.clock = clock
        self._tasks = []
        self._seq = 0

    def _add(self, delay, callback, label, interval):
        handle = TimerHandle(label)
        self._seq += 1
        self._tasks.append({
            'due': self.clock.ms + int(delay * 1000),
            'seq': self._seq,
            'interval': int(interval * 1000) if interval else None,
            'callback': callback,
            'handle': handle,
        })
        return handle

    def call_later(self, delay, callback, label=''):
        return self._add(delay, callback, label, None)

    def call_every(self, interval, callback, label=''):
        return self._add(interval, callback, label, interval)

    def pending(self):
        self._tasks = [t for t in self._tasks if not t['handle'].cancelled]
        return list(self._tasks)

    def advance(self, seconds):
        target = self.clock.ms + int(round(seconds * 1000))
        while True:
            due = [t for t in self.pending() if t['due'] <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t['due'], t['seq']))
            self.clock.ms = task['due']
            if task['interval']:
                task['due'] += task['interval']
            else:
                self._tasks.remove(task)
            task['callback']()
        self.clock.ms = target


class RecordingBroadcaster:
    def __init__(self):
        self.sent = []
        self.room_events = []
        # called as on_send(connection, event) after each send
        self.on_send = None

    def send(self, connection, event):
        self.sent.append((connection, event))
        if self.on_send is not None:
            self.on_send(connection, event)

    def broadcast(self, room, event):
        self.room_events.append((room.code, event))
        for player in list(room.players):
            self.send(player.connection, event)

    def received(self, connection, event_type=None):
        return [e for c, e in self.sent if c == connection and (event_type is None or e['type'] == event_type)]

    def room_types(self, code):
        return [e['type'] for c, e in self.room_events if c == code]

    def room_of_type(self, code, event_type):
        return [e for c, e in self.room_events if c == code and e['type'] == event_type]


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def catalog():
    return StaticPhotoCatalog(PHOTOS)


@pytest.fixture()
def store():
    return RoomStore(rng=random.Random(1234))


@pytest.fixture()
def service(store, catalog, broadcaster, scheduler, clock):
    return GameService(
        store=store,
        catalog=catalog,
        broadcaster=broadcaster,
        scheduler=scheduler,
        clock=clock,
        rng=random.Random(42),
    )


# Connections the scenarios use; each is open before its first message.
CONNECTIONS = ('sid-amy', 'sid-bob', 'sid-bob2', 'sid-cat', 'sid-nobody')


@pytest.fixture()
def make_dispatcher():
    def _make(service):
        dispatcher = MessageDispatcher(service, ConnectionRegistry())
        for sid in CONNECTIONS:
            dispatcher.connect(sid)
        return dispatcher

    return _make


@pytest.fixture()
def dispatcher(make_dispatcher, service):
    return make_dispatcher(service)


@pytest.fixture()
def lobby_room(dispatcher, broadcaster, store):
    """Amy hosts, Bob has joined; still in the lobby."""
    dispatcher.dispatch('sid-amy', {'type': 'create_room', 'playerName': 'Amy', 'rounds': 3})
    code = broadcaster.received('sid-amy', 'room_created')[0]['code']
    dispatcher.dispatch('sid-bob', {'type': 'join_room', 'playerName': 'Bob', 'code': code})
    return store.get_room(code)


@pytest.fixture()
def playing_room(dispatcher, lobby_room):
    dispatcher.dispatch('sid-amy', {'type': 'start_game'})
    assert lobby_room.state == 'playing'
    return lobby_room


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'


@pytest.fixture()
def flask_app():
    app, socketio = create_app(
        TestConfig,
        catalog=StaticPhotoCatalog(PHOTOS),
        scheduler_factory=lambda sio: ManualScheduler(FakeClock()),
    )
    app.socketio = socketio
    return app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        c = flask_app.socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
