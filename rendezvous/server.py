# rendezvous/server.py

import logging
import socket
import time

from config import (
    ERROR_BACKOFF_MAX,
    PEER_TTL,
    POLL_INTERVAL,
    RECV_BUFFER_SIZE,
    RENDEZVOUS_HOST,
    RENDEZVOUS_PORT,
)
from rendezvous.handler import handle_message
from rendezvous.messages import MessageDecodeError, decode, encode, format_address
from rendezvous.registry import PeerRegistry

logger = logging.getLogger(__name__)


class RendezvousServer:
    """
    Single-threaded UDP rendezvous server.

    Peers register the address the server sees them from, query each other,
    and ask the server to introduce two peers so both can punch through
    their NATs at the same time. The server never relays application data.
    """

    def __init__(
        self,
        host=RENDEZVOUS_HOST,
        port=RENDEZVOUS_PORT,
        registry=None,
        poll_interval=POLL_INTERVAL,
        buffer_size=RECV_BUFFER_SIZE,
    ):
        self.registry = registry if registry is not None else PeerRegistry(ttl=PEER_TTL)
        self.poll_interval = poll_interval
        self.buffer_size = buffer_size
        self._running = True

        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        self.sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            self.sock.bind((host, port))
            self.sock.setblocking(False)
        except OSError:
            self.sock.close()
            raise
        logger.info("Rendezvous server listening on %s", format_address(self.address))

    @property
    def address(self):
        return self.sock.getsockname()[:2]

    def handle_datagram(self, data, from_addr):
        from_addr = tuple(from_addr[:2])
        try:
            message = decode(data)
        except MessageDecodeError as e:
            logger.debug("Dropping undecodable datagram from %s: %s", format_address(from_addr), e)
            return

        for addr, reply in handle_message(message, from_addr, self.registry):
            self.send(reply, addr)

    def send(self, message, addr):
        try:
            self.sock.sendto(encode(message), addr)
        except OSError as e:
            logger.error("Failed to send %s to %s: %s", type(message).__name__, format_address(addr), e)

    def serve_forever(self):
        backoff = self.poll_interval
        while self._running:
            try:
                data, addr = self.sock.recvfrom(self.buffer_size)
            except BlockingIOError:
                time.sleep(self.poll_interval)
                continue
            except OSError as e:
                logger.error("Socket error: %s", e)
                time.sleep(backoff)
                backoff = min(backoff * 2, ERROR_BACKOFF_MAX)
                continue

            backoff = self.poll_interval
            self.handle_datagram(data, addr)

    def stop(self):
        """Ask serve_forever to return after the current iteration."""
        self._running = False

    def close(self):
        self.stop()
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def start_rendezvous_server(host=RENDEZVOUS_HOST, port=RENDEZVOUS_PORT, peer_ttl=PEER_TTL):
    with RendezvousServer(host, port, registry=PeerRegistry(ttl=peer_ttl)) as server:
        server.serve_forever()
