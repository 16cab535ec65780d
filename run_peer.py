import argparse
import logging

from config import LOG_DATEFMT, LOG_FORMAT, LOG_LEVEL, RENDEZVOUS_PORT
from peer.rendezvous_client import RendezvousClient
from rendezvous.messages import format_address, parse_address


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Register with a rendezvous server and punch to another peer")
    parser.add_argument("--server", type=parse_address, default=("127.0.0.1", RENDEZVOUS_PORT), help="rendezvous server host:port")
    parser.add_argument("--id", required=True, dest="peer_id", help="this peer's identifier")
    parser.add_argument("--private", type=parse_address, help="self-declared private address host:port")
    parser.add_argument("--bind", type=parse_address, help="local UDP address host:port (default: any, matching the server family)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--connect", metavar="PEER", help="ask the server to introduce us to PEER")
    group.add_argument("--query", metavar="PEER", help="look up PEER's registered addresses")
    parser.add_argument("--timeout", type=float, default=5.0, help="seconds to wait for the server")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def print_peer(record):
    print(f"[+] Peer {record.peer_id}")
    print(f"    public:  {format_address(record.public_address)}")
    print(f"    private: {format_address(record.private_address)}")


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    with RendezvousClient(args.server, bind=args.bind) as client:
        # 1) Register; the server records the address it sees us from
        private = args.private
        if private is None and client.address[0] not in ("0.0.0.0", "::"):
            private = client.address
        client.register(args.peer_id, private)
        print(f"[*] Registered as {args.peer_id} with {format_address(args.server)} (private {format_address(private)})")

        # 2) Look up a peer without introducing ourselves
        if args.query:
            client.query(args.query)
            record = client.wait_for_peer(args.timeout)
            if record is None:
                print(f"[!] No answer for {args.query} (unknown peer or lost datagram)")
                return 1
            print_peer(record)
            return 0

        # 3) Ask for an introduction, or wait for someone to ask for one
        if args.connect:
            client.initiate(args.peer_id, args.connect)
            print(f"[*] Requested introduction to {args.connect}")
        else:
            print("[*] Waiting to be introduced…")

        record = client.wait_for_peer(args.timeout)
        if record is None:
            print("[!] No introduction received")
            return 1
        print_peer(record)

        # 4) Punch
        reached = client.punch(record)
        if reached is None:
            print(f"[!] Could not reach {record.peer_id}")
            return 1
        print(f"[+] Direct path to {record.peer_id} open via {format_address(reached)}")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
