"""Network helper utilities.

`get_local_ip` gives `mealcrew.main` a LAN address to print on startup.
`client_ip` and `submission_key` derive the keys used by the in-memory rate
limiters from an incoming request.
"""
import socket


def get_local_ip() -> str:
    """Return a non-loopback local IP address if possible, otherwise '127.0.0.1'.

    Connecting a UDP socket asks the OS which interface would be selected to
    reach a public IP; no data is sent on the wire.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(("8.8.8.8", 80))
        ip = str(s.getsockname()[0])
    except OSError:
        ip = "127.0.0.1"
    finally:
        s.close()
    return ip


def client_ip(request) -> str:
    """First address of X-Forwarded-For, else the socket peer, else 'unknown'."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or "unknown"
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def submission_key(request) -> str:
    user_agent = request.headers.get("user-agent") or "unknown"
    return f"{client_ip(request)}:{user_agent[:50]}"


def masked_ip(ip: str) -> str:
    """Partial IP for log lines."""
    return ip[:12] + "..." if len(ip) > 12 else ip
