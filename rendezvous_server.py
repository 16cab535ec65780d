# rendezvous_server.py

import argparse
import logging

from config import LOG_DATEFMT, LOG_FORMAT, LOG_LEVEL, PEER_TTL, RENDEZVOUS_HOST, RENDEZVOUS_PORT
from rendezvous.server import start_rendezvous_server


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="UDP rendezvous server for NAT hole punching")
    parser.add_argument("--host", default=RENDEZVOUS_HOST, help="address to bind (default %(default)s)")
    parser.add_argument("--port", type=int, default=RENDEZVOUS_PORT, help="UDP port (default %(default)s)")
    parser.add_argument(
        "--peer-ttl",
        type=float,
        default=PEER_TTL,
        help="seconds before an unrefreshed peer is treated as gone; 0 keeps peers forever",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help="logging level (default %(default)s)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    try:
        start_rendezvous_server(args.host, args.port, peer_ttl=args.peer_ttl)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Shutting down")


if __name__ == "__main__":
    main()
