"""Shared test fixtures for the Shiptivity clients service."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (pkg/, shiptivity_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from pkg.shiptivity.schema import Lane
from pkg.shiptivity.store import ClientStore


@pytest.fixture
def store(tmp_path):
    s = ClientStore(str(tmp_path / "clients.db"))
    yield s
    s.close()


@pytest.fixture
def board(store):
    """
    A small board:
        backlog:     A(1, prio 3)  B(2, prio 1)  C(3, prio 2)
        in-progress: D(1)          E(2)
        complete:    F(1)
    """
    ids = {}
    ids["A"] = store.add("A", Lane.BACKLOG, 1, 3).id
    ids["B"] = store.add("B", Lane.BACKLOG, 2, 1).id
    ids["C"] = store.add("C", Lane.BACKLOG, 3, 2).id
    ids["D"] = store.add("D", Lane.IN_PROGRESS, 1).id
    ids["E"] = store.add("E", Lane.IN_PROGRESS, 2).id
    ids["F"] = store.add("F", Lane.COMPLETE, 1).id
    return ids
