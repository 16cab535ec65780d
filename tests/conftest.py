"""
Shared fixtures for the rendezvous tests.
"""

import threading
from typing import Generator

import pytest

from rendezvous.registry import PeerRegistry
from rendezvous.server import RendezvousServer


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> PeerRegistry:
    return PeerRegistry(clock=clock)


@pytest.fixture
def server(registry: PeerRegistry) -> Generator[RendezvousServer, None, None]:
    """A loopback server running its poll loop in a background thread."""
    server = RendezvousServer("127.0.0.1", 0, registry=registry, poll_interval=0.005)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.stop()
    thread.join(timeout=2)
    server.close()
