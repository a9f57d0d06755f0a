"""Address helpers: NAT-safe address mangling, version extraction and resolution."""

from __future__ import annotations

import ipaddress
import re
import socket
import time
from typing import Optional, Union

_U32 = 0xFFFFFFFF
_U128 = (1 << 128) - 1
_I32_PATTERN = re.compile(r"[+-]?[0-9]+")


def mangle(
    host: Union[str, ipaddress.IPv4Address], port: int, timestamp: Optional[int] = None
) -> bytes:
    """Encode an IPv4 address and port so that it does not appear verbatim on the wire.

    Some routers and firewalls rewrite any bytes that look like one of their
    NAT addresses, so the address is mixed with a timestamp. ``timestamp`` is
    in microseconds since the epoch (only its low 32 bits are used) and
    defaults to the current time. Trailing zero bytes are dropped.
    """
    ip = ipaddress.ip_address(host)
    if not isinstance(ip, ipaddress.IPv4Address):
        raise ValueError("Only support ipv4")
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    if timestamp is None:
        timestamp = time.time_ns() // 1000
    tm = timestamp & _U32
    ip_num = int.from_bytes(ip.packed, "little")
    value = (((ip_num + tm) << 49) | (tm << 17) | (port + (tm & 0xFFFF))) & _U128
    return value.to_bytes(16, "little").rstrip(b"\x00")


def unmangle(data: bytes) -> tuple[str, int]:
    """Decode bytes made by :func:`mangle` back into ``(host, port)``."""
    if len(data) > 16:
        raise ValueError("mangled address is longer than 16 bytes")
    number = int.from_bytes(bytes(data).ljust(16, b"\x00"), "little")
    tm = (number >> 17) & _U32
    ip_num = ((number >> 49) - tm) & _U32
    port = ((number & 0xFFFFFF) - (tm & 0xFFFF)) & 0xFFFF
    host = str(ipaddress.IPv4Address(ip_num.to_bytes(4, "little")))
    return host, port


def _parses_as_i32(text: str) -> bool:
    if not _I32_PATTERN.fullmatch(text):
        return False
    return -(1 << 31) <= int(text) < (1 << 31)


def get_version_from_url(url: str) -> str:
    """Extract the version from a download URL such as ``.../app-1.1.9.exe``.

    The version is what follows the last ``-``; a trailing extension after the
    last ``.`` is dropped unless it is a number. Returns ``""`` if the URL has
    no ``-`` or no ``.``.
    """
    n = len(url)
    dash = url.rfind("-")
    dot = url.rfind(".")
    if dash < 0 or dot < 0:
        return ""
    a = n - 1 - dash
    b = n - 1 - dot
    if a > b:
        if _parses_as_i32(url[n - b:]):
            return url[n - a:]
        return url[n - a:n - 1 - b]
    return url[n - a:]


def _split_host_port(text: str) -> tuple[str, int]:
    if text.startswith("["):
        end = text.find("]")
        if end < 0 or not text[end + 1:].startswith(":"):
            raise ValueError(f"invalid socket address: {text}")
        host, port_text = text[1:end], text[end + 2:]
    else:
        host, sep, port_text = text.rpartition(":")
        if not sep or not host:
            raise ValueError(f"invalid socket address: {text}")
    if not port_text.isdigit() or int(port_text) > 0xFFFF:
        raise ValueError(f"invalid port value: {port_text!r}")
    return host, int(port_text)


def to_socket_addr(host: str) -> tuple[str, int]:
    """Resolve ``"host:port"`` and return the first address as ``(ip, port)``."""
    name, port = _split_host_port(host)
    infos = socket.getaddrinfo(name, port, type=socket.SOCK_STREAM)
    if not infos:
        raise OSError(f"Failed to solve {host}")
    sockaddr = infos[0][4]
    return sockaddr[0], sockaddr[1]