"""Shared fixtures: a seeded registry with hand-driven timers and a test app."""

import random

import pytest

from survivor.config import Config
from survivor.game.service import RoomRegistry
from survivor.game.store import MemoryRoomStore
from survivor.game.timers import TaskScheduler


class ManualTasks:
    """Collects scheduled runners so tests decide when the grace period ends."""

    def __init__(self):
        self.runners = []
        self.scheduler = TaskScheduler(start_task=self.runners.append, sleep=lambda _delay: None)

    def fire_all(self):
        runners, self.runners = self.runners, []
        for runner in runners:
            runner()


class AppTestConfig(Config):
    TESTING = True
    ROOMS_FILE = ""
    ADMIN_TOKEN = "secret"
    TRUST_PROXY_HEADERS = False


@pytest.fixture
def tasks():
    return ManualTasks()


@pytest.fixture
def registry(tasks):
    return RoomRegistry(
        store=MemoryRoomStore(),
        rng=random.Random(1234),
        scheduler=tasks.scheduler,
        grace_period_sec=5,
    )


@pytest.fixture
def make_room(registry):
    """Create a room with ``count`` players named Alice, Bob, ... using sessions s0, s1, ..."""
    names = ["Alice", "Bob", "Carol", "Dave", "Erin", "Frank", "Grace", "Heidi"]

    def _make(count=4, scenario_id="desert", max_players=None, ready=False):
        room = registry.create_room("s0", names[0], scenario_id, max_players or max(count, 3))
        for i in range(1, count):
            room = registry.join_room(room.code, f"s{i}", names[i])
        if ready:
            for i in range(count):
                room = registry.toggle_ready(room.code, f"s{i}")
        return room

    return _make


@pytest.fixture
def app(registry):
    from survivor.server import create_app

    flask_app, socketio = create_app(config=AppTestConfig, registry=registry, async_mode="threading")
    flask_app.extensions["test_socketio"] = socketio
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
