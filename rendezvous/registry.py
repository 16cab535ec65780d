# rendezvous/registry.py

import logging
import math
import time

from rendezvous.messages import PeerRecord

logger = logging.getLogger(__name__)


class PeerRegistry:
    """
    In-memory table of known peers keyed by peer id.

    Records are created on first registration and overwritten by every later one
    (last write wins). Nothing is ever deleted. With a positive ``ttl`` a record
    not refreshed within ``ttl`` seconds is reported as absent by ``lookup``
    and ``in``, though it still counts towards ``len``.
    """

    def __init__(self, clock=time.time, ttl=0):
        self._clock = clock
        self._ttl = ttl
        self._peers = {}

    def register(self, peer_id, public_address, private_address=None):
        """Insert or overwrite ``peer_id``. ``public_address`` must be the
        source address observed by the transport."""
        now = self._clock()
        previous = self._peers.get(peer_id)
        if previous is not None and now <= previous.last_seen:
            now = math.nextafter(previous.last_seen, math.inf)

        record = PeerRecord(
            peer_id=peer_id,
            public_address=tuple(public_address),
            private_address=tuple(private_address) if private_address is not None else None,
            last_seen=now,
        )
        self._peers[peer_id] = record
        return record

    def lookup(self, peer_id):
        record = self._peers.get(peer_id)
        if record is None:
            return None
        if self._ttl > 0:
            age = self._clock() - record.last_seen
            if age > self._ttl:
                logger.debug("Peer %s is stale (last seen %.1fs ago)", peer_id, age)
                return None
        return record

    def __len__(self):
        # stored records, stale ones included
        return len(self._peers)

    def __contains__(self, peer_id):
        return self.lookup(peer_id) is not None
