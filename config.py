import os

# Network settings
RENDEZVOUS_HOST = os.environ.get("RENDEZVOUS_HOST", "0.0.0.0")
RENDEZVOUS_PORT = int(os.environ.get("RENDEZVOUS_PORT", 8000))  # UDP port for the rendezvous server
RECV_BUFFER_SIZE = int(os.environ.get("RECV_BUFFER_SIZE", 65536))

# Transport loop timing (seconds)
POLL_INTERVAL = float(os.environ.get("POLL_INTERVAL", 0.01))
ERROR_BACKOFF_MAX = float(os.environ.get("ERROR_BACKOFF_MAX", 1.0))

# Registry settings
PEER_TTL = float(os.environ.get("PEER_TTL", 0))  # seconds; 0 disables staleness checks

# Peer side
PUNCH_ATTEMPTS = 5
PUNCH_INTERVAL = 0.2
PUNCH_PAYLOAD = b"PUNCH"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
