"""Shared pytest fixtures."""

import pytest

from trickmatch.models.team import Team
from trickmatch.repositories.memory_repository import MemoryMatchRepository
from trickmatch.services.match_service import MatchService


@pytest.fixture
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


@pytest.fixture
def team1():
    """Team holding seats 1 and 3."""
    return Team(player1="A", player2="B")


@pytest.fixture
def team2():
    """Team holding seats 2 and 4."""
    return Team(player1="C", player2="D")


@pytest.fixture
def store():
    """Empty in-memory match store."""
    return MemoryMatchRepository()


@pytest.fixture
def match_service(store):
    """Match service without notifiers."""
    return MatchService(store)
