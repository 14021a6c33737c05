"""Endpoint descriptions and TCP reachability checks."""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Optional

_TIMEOUT_SECONDS = 5.0


@dataclass
class HostPort:
    address: str
    port: int

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass
class Endpoint:
    name: str
    internal: Optional[HostPort] = None
    external: Optional[HostPort] = None


@dataclass
class MockOptions:
    desired_endpoint: str


def tcp_check(hp: HostPort, mock: Optional[MockOptions] = None) -> bool:
    """Return whether a TCP connection to hp can be opened.

    With mock options, only compare ``address:port`` with the desired endpoint.
    """
    if mock is not None:
        return mock.desired_endpoint == str(hp)
    try:
        with socket.create_connection((hp.address, hp.port), timeout=_TIMEOUT_SECONDS):
            return True
    except OSError:
        return False