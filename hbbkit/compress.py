"""zstd compression helpers that return empty bytes on failure."""

from __future__ import annotations

import logging
import threading

import zstandard

_log = logging.getLogger(__name__)

DEFAULT_LEVEL = 3
_MAX_OUTPUT = 64 * 1024 * 1024
_MIN_OUTPUT = 1024 * 1024

_local = threading.local()


def _decompressor() -> zstandard.ZstdDecompressor:
    d = getattr(_local, "decompressor", None)
    if d is None:
        d = _local.decompressor = zstandard.ZstdDecompressor()
    return d


def compress(data: bytes, level: int = 0) -> bytes:
    """Compress ``data`` with zstd; level 0 means the default level.

    Returns empty bytes if compression fails.
    """
    try:
        compressor = zstandard.ZstdCompressor(level=level or DEFAULT_LEVEL)
        return compressor.compress(bytes(data))
    except (zstandard.ZstdError, ValueError) as err:
        _log.debug("Failed to compress: %s", err)
        return b""


def decompress(data: bytes) -> bytes:
    """Decompress zstd ``data``, allowing at most 30 times its size in output.

    The limit is clamped to between 1 MiB and 64 MiB. Returns empty bytes if
    the data is invalid or would exceed the limit.
    """
    limit = min(max(30 * len(data), _MIN_OUTPUT), _MAX_OUTPUT)
    try:
        size = zstandard.frame_content_size(bytes(data))
        if size > limit:
            raise zstandard.ZstdError(f"content size {size} exceeds {limit}")
        out = _decompressor().decompress(bytes(data), max_output_size=limit)
        if len(out) > limit:
            raise zstandard.ZstdError(f"output exceeds {limit}")
        return out
    except (zstandard.ZstdError, ValueError) as err:
        _log.debug("Failed to decompress: %s", err)
        return b""