# rendezvous/handler.py

import logging

from rendezvous.messages import (
    InitiateConnection,
    PeerInfo,
    Query,
    Register,
    format_address,
)

logger = logging.getLogger(__name__)


def handle_message(message, from_addr, registry):
    """
    Apply one decoded message to the registry.

    Returns a list of ``(address, message)`` pairs to send. Lookup misses
    return an empty list: the protocol has no error reply.
    """
    if isinstance(message, Register):
        record = registry.register(message.peer_id, from_addr, message.private_address)
        logger.debug(
            "Peer %s registered: public=%s private=%s",
            record.peer_id,
            format_address(record.public_address),
            format_address(record.private_address),
        )
        return []

    if isinstance(message, Query):
        record = registry.lookup(message.target_peer_id)
        if record is None:
            logger.debug("Query from %s for unknown peer %s", format_address(from_addr), message.target_peer_id)
            return []
        return [(from_addr, PeerInfo(peer=record))]

    if isinstance(message, InitiateConnection):
        from_peer = registry.lookup(message.from_peer_id)
        to_peer = registry.lookup(message.to_peer_id)
        if from_peer is None or to_peer is None:
            logger.debug(
                "Cannot introduce %s <-> %s: %s not registered",
                message.from_peer_id,
                message.to_peer_id,
                message.from_peer_id if from_peer is None else message.to_peer_id,
            )
            return []

        logger.debug("Starting hole punching: %s <-> %s", from_peer.peer_id, to_peer.peer_id)
        return [
            (from_peer.public_address, PeerInfo(peer=to_peer)),
            (to_peer.public_address, PeerInfo(peer=from_peer)),
        ]

    # PeerInfo is server-to-peer only
    logger.debug("Ignoring %s from %s", type(message).__name__, format_address(from_addr))
    return []
