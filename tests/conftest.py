import random

import pytest
from fastapi.testclient import TestClient

import sys, os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import game_data
import server
from game_engine import TableSession
from table_manager import TableManager


@pytest.fixture
def session():
    return TableSession(rng=random.Random(1234))


@pytest.fixture
def manager(monkeypatch):
    # Свежий стол на каждый тест вместо глобального
    mgr = TableManager(TableSession(rng=random.Random(99)), game_data.ConnectionManager())
    monkeypatch.setattr(game_data, "manager", mgr)
    return mgr


@pytest.fixture
def client(manager):
    with TestClient(server.app) as c:
        yield c
