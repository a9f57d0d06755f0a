"""Key tables, a keyboard DSL, framing, compression, asyncio networking and file-transfer helpers."""

__version__ = "0.1.0"