"""Shared fixtures for frigo tests."""

from datetime import datetime

import pytest

from frigo.shared.config import Config
from frigo.shared.models import Room
from frigo.shared.store import MemoryStore

TENANT = "tenant-1"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def config():
    return Config.from_dict({"tenant_id": TENANT, "store": {"backend": "memory"}})


def make_room(room_id, name, sensor_id, installed=True, device=None, **extra):
    return Room(
        id=room_id,
        tenant_id=TENANT,
        name=name,
        capacity=extra.pop("capacity", 6000),
        sensor_id=sensor_id,
        capteur_installed=installed,
        boitie_sensor_id=device,
        **extra,
    )


@pytest.fixture
def rooms():
    return [
        make_room("r1", "Chambre 1", "S-CH1"),
        make_room("r2", "Chambre 2", "S-CH2"),
        make_room("r3", "Chambre 3", "S-CH3", installed=False),
    ]


@pytest.fixture
def now():
    return datetime(2024, 3, 15, 14, 30, 0)


@pytest.fixture
def room_factory():
    return make_room
