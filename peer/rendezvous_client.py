# peer/rendezvous_client.py

import logging
import socket
import time

from config import PUNCH_ATTEMPTS, PUNCH_INTERVAL, PUNCH_PAYLOAD, RECV_BUFFER_SIZE
from rendezvous.messages import (
    InitiateConnection,
    MessageDecodeError,
    PeerInfo,
    Query,
    Register,
    decode,
    encode,
    format_address,
)

logger = logging.getLogger(__name__)


class RendezvousClient:
    """Peer side of the rendezvous protocol over a single UDP socket.

    The same socket is used to talk to the server and to punch, so the NAT
    mapping the server observed is the one the other peer will target.
    """

    def __init__(self, server_address, bind=None):
        host, port = server_address
        family, _, _, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)[0]
        self.server_address = tuple(sockaddr[:2])
        if bind is None:
            bind = ("::", 0) if family == socket.AF_INET6 else ("0.0.0.0", 0)
        self.sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            self.sock.bind(bind)
        except OSError:
            self.sock.close()
            raise

    @property
    def address(self):
        return self.sock.getsockname()[:2]

    def _send(self, message):
        self.sock.sendto(encode(message), self.server_address)

    def register(self, peer_id, private_address=None):
        self._send(Register(peer_id=peer_id, private_address=private_address))

    def query(self, target_peer_id):
        self._send(Query(target_peer_id=target_peer_id))

    def initiate(self, from_peer_id, to_peer_id):
        self._send(InitiateConnection(from_peer_id=from_peer_id, to_peer_id=to_peer_id))

    def wait_for_peer(self, timeout=2.0):
        """Return the next PeerRecord sent by the server, or None on timeout."""
        end = time.time() + timeout
        while True:
            remaining = end - time.time()
            if remaining <= 0:
                return None
            self.sock.settimeout(remaining)
            try:
                data, addr = self.sock.recvfrom(RECV_BUFFER_SIZE)
            except socket.timeout:
                return None

            if tuple(addr[:2]) != self.server_address:
                continue
            try:
                message = decode(data)
            except MessageDecodeError as e:
                logger.debug("Ignoring undecodable datagram from server: %s", e)
                continue
            if isinstance(message, PeerInfo):
                return message.peer

    def punch(self, record, attempts=PUNCH_ATTEMPTS, interval=PUNCH_INTERVAL):
        """
        Send probes to both addresses of ``record`` and return the first of
        them a datagram arrives from, or None once all attempts are used up.
        """
        targets = [record.public_address]
        if record.private_address is not None and record.private_address != record.public_address:
            targets.append(record.private_address)

        for attempt in range(attempts):
            for target in targets:
                try:
                    self.sock.sendto(PUNCH_PAYLOAD, target)
                except OSError as e:
                    logger.debug("Probe to %s failed: %s", format_address(target), e)

            end = time.time() + interval
            while True:
                remaining = end - time.time()
                if remaining <= 0:
                    break
                self.sock.settimeout(remaining)
                try:
                    _, addr = self.sock.recvfrom(RECV_BUFFER_SIZE)
                except socket.timeout:
                    break
                except ConnectionResetError:
                    # ICMP port unreachable surfaces here on some platforms
                    continue
                addr = tuple(addr[:2])
                if addr in targets:
                    logger.info("Reached %s at %s after %d attempt(s)", record.peer_id, format_address(addr), attempt + 1)
                    return addr
        return None

    def close(self):
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
