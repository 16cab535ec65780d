# rendezvous/messages.py

from typing import Optional, Tuple, Union

import msgspec

Address = Tuple[str, int]


class MessageDecodeError(ValueError):
    """Raised when a datagram cannot be decoded into a rendezvous message."""


class PeerRecord(msgspec.Struct, array_like=True, frozen=True):
    peer_id: str
    public_address: Address
    private_address: Optional[Address]
    last_seen: float


# Integer tags keep the datagrams small; order is the wire discriminant.
class Register(msgspec.Struct, tag=0, array_like=True, frozen=True):
    peer_id: str
    private_address: Optional[Address] = None


class Query(msgspec.Struct, tag=1, array_like=True, frozen=True):
    target_peer_id: str


class PeerInfo(msgspec.Struct, tag=2, array_like=True, frozen=True):
    peer: PeerRecord


class InitiateConnection(msgspec.Struct, tag=3, array_like=True, frozen=True):
    from_peer_id: str
    to_peer_id: str


Message = Union[Register, Query, PeerInfo, InitiateConnection]

_encoder = msgspec.msgpack.Encoder()
_decoder = msgspec.msgpack.Decoder(Message)


def encode(message) -> bytes:
    return _encoder.encode(message)


def decode(data: bytes):
    """Decode one datagram. Truncated, corrupt or unknown-tag input raises
    MessageDecodeError; the caller is expected to drop the datagram."""
    try:
        return _decoder.decode(data)
    except msgspec.DecodeError as e:
        raise MessageDecodeError(str(e)) from e


def parse_address(text: str) -> Address:
    """Parse ``host:port`` (or ``[v6host]:port``) into an address tuple."""
    host, sep, port = text.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"invalid address: {text!r}")
    host = host.strip("[]")
    try:
        port = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address: {text!r}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range in address: {text!r}")
    return host, port


def format_address(address: Optional[Address]) -> str:
    if address is None:
        return "-"
    host, port = address
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
