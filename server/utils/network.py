"""
Network info module.

Enumerates the host's addresses for the startup banner.
"""

import socket
from dataclasses import dataclass
from typing import List, Optional

LOOPBACK_ADDRESSES = [
    ('lo', 'IPv4', '127.0.0.1'),
    ('lo', 'IPv6', '::1'),
]


@dataclass(frozen=True)
class NetworkInterface:
    """One address the server can be reached on."""
    interface: str
    family: str  # IPv4 / IPv6
    address: str
    internal: bool  # True = localhost


def _primary_local_ip() -> Optional[str]:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # Nothing is sent, this only selects the default interface
            s.connect(('8.8.8.8', 80))
            return s.getsockname()[0]
    except OSError:
        return None


def get_network_info() -> List[NetworkInterface]:
    """Collect loopback and LAN addresses, deduplicated, loopback first."""
    results = [NetworkInterface(name, family, address, True) for name, family, address in LOOPBACK_ADDRESSES]
    seen = {info.address for info in results}

    lan = []
    primary = _primary_local_ip()
    if primary:
        lan.append(('IPv4', primary))

    try:
        for family, _, _, _, sockaddr in socket.getaddrinfo(socket.gethostname(), None):
            if family == socket.AF_INET:
                lan.append(('IPv4', sockaddr[0]))
            elif family == socket.AF_INET6:
                lan.append(('IPv6', sockaddr[0].split('%')[0]))
    except OSError:
        pass

    for family, address in lan:
        if address in seen:
            continue
        seen.add(address)
        internal = address.startswith('127.') or address == '::1'
        results.append(NetworkInterface(socket.gethostname(), family, address, internal))

    return results


def format_url(address: str, family: str, port: int) -> str:
    if family == 'IPv6':
        return f"http://[{address}]:{port}"
    return f"http://{address}:{port}"


def format_banner(port: int, infos: List[NetworkInterface]) -> List[str]:
    """Lines printed when the server comes up."""
    lines = [
        "=================================",
        "SERVER RUNNING",
        "",
        "LOCAL:",
        f"  - http://localhost:{port}",
        f"  - http://127.0.0.1:{port}",
        f"  - http://[::1]:{port}",
        "",
        "NETWORK INTERFACES:",
    ]
    for net in infos:
        if net.internal:
            kind = "LOCALHOST"
        elif net.family == "IPv4":
            kind = "LAN IPv4"
        else:
            kind = "LAN IPv6"
        lines.append(f"- {net.interface} | {kind} | {net.family}")
        lines.append(f"  {format_url(net.address, net.family, port)}")
    lines.append("=================================")
    return lines
