"""Directory listing and chunked, compressed file transfer jobs."""

from __future__ import annotations

import os
import string
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import BinaryIO, Optional, Union

from .compress import compress, decompress

PathLike = Union[str, "os.PathLike[str]"]

BUF_SIZE = 128 * 1024
"""Largest amount of file data read into one block."""

_DOWNLOAD_SUFFIX = ".download"
_COMPRESSED_EXTENSIONS = frozenset({"xz", "gz", "zip", "7z", "rar", "bz2", "tgz", "png", "jpg"})
_WINDOWS_HIDDEN = 0x2


class FileType(Enum):
    """Kind of a directory entry."""

    DIR = auto()
    DIR_LINK = auto()
    DIR_DRIVE = auto()
    FILE = auto()
    FILE_LINK = auto()


@dataclass
class FileEntry:
    """One entry of a directory listing or of a transfer job's file list."""

    name: str = ""
    entry_type: FileType = FileType.FILE
    is_hidden: bool = False
    size: int = 0
    modified_time: int = 0


@dataclass
class FileDirectory:
    """The entries of one directory."""

    path: str = ""
    entries: list[FileEntry] = field(default_factory=list)
    id: int = 0


@dataclass
class FileTransferBlock:
    """A chunk of one file of a transfer job."""

    id: int
    file_num: int
    data: bytes = b""
    compressed: bool = False


class TransferError(Exception):
    """A block does not belong to the job it was given to."""


def _mtime_seconds(st: os.stat_result) -> int:
    return max(int(st.st_mtime), 0)


def _drives() -> list[FileEntry]:
    return [
        FileEntry(name=f"{letter}:", entry_type=FileType.DIR_DRIVE)
        for letter in string.ascii_uppercase
        if os.path.exists(f"{letter}:\\")
    ]


def _is_hidden(name: str, st: os.stat_result) -> bool:
    if os.name == "nt":
        return bool(getattr(st, "st_file_attributes", 0) & _WINDOWS_HIDDEN)
    return name.startswith(".")


def read_dir(path: PathLike, include_hidden: bool = False) -> FileDirectory:
    """List a directory; symbolic links are reported as links, not followed.

    On Windows the path ``/`` lists the available drives.
    """
    path_str = os.fspath(path)
    directory = FileDirectory(path=path_str)
    if os.name == "nt" and path_str == "/":
        directory.entries = _drives()
        return directory
    with os.scandir(path_str) as it:
        for entry in it:
            name = entry.name
            if not name:
                continue
            try:
                st = os.lstat(entry.path)
            except OSError:
                continue
            hidden = _is_hidden(name, st)
            if hidden and not include_hidden:
                continue
            is_link = os.path.islink(entry.path)
            if os.path.isdir(entry.path):
                entry_type, size = (FileType.DIR_LINK if is_link else FileType.DIR), 0
            elif is_link:
                entry_type, size = FileType.FILE_LINK, 0
            else:
                entry_type, size = FileType.FILE, st.st_size
            directory.entries.append(
                FileEntry(
                    name=name,
                    entry_type=entry_type,
                    is_hidden=hidden,
                    size=size,
                    modified_time=_mtime_seconds(st),
                )
            )
    return directory


def _read_dir_recursive(path: str, prefix: str, include_hidden: bool) -> list[FileEntry]:
    if os.path.isdir(path):
        files: list[FileEntry] = []
        for entry in read_dir(path, include_hidden).entries:
            if entry.entry_type is FileType.FILE:
                files.append(replace(entry, name=os.path.join(prefix, entry.name)))
            elif entry.entry_type is FileType.DIR:
                try:
                    files.extend(
                        _read_dir_recursive(
                            os.path.join(path, entry.name),
                            os.path.join(prefix, entry.name),
                            include_hidden,
                        )
                    )
                except OSError:
                    pass
        return files
    if os.path.isfile(path):
        try:
            st = os.stat(path)
            size, mtime = st.st_size, _mtime_seconds(st)
        except OSError:
            size, mtime = 0, 0
        return [FileEntry(entry_type=FileType.FILE, size=size, modified_time=mtime)]
    raise FileNotFoundError(f"Not exists: {path}")


def get_recursive_files(path: PathLike, include_hidden: bool = False) -> list[FileEntry]:
    """Return every regular file below ``path`` with names relative to it.

    Symbolic links are skipped. If ``path`` is itself a file, the single entry
    returned has an empty name.
    """
    return _read_dir_recursive(os.fspath(path), "", include_hidden)


def _extension(name: str) -> str:
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


def _is_compressed_file(name: str) -> bool:
    return _extension(name) in _COMPRESSED_EXTENSIONS


class TransferJob:
    """Reads a set of files as blocks, or writes received blocks back to files.

    Files being written go to ``<name>.download`` until :meth:`modify_time`
    moves them into place.
    """

    def __init__(
        self,
        job_id: int,
        path: PathLike,
        files: list[FileEntry],
        compress_level: int = 0,
    ) -> None:
        self.id = job_id
        self.path = os.fspath(path)
        self.files = list(files)
        self.compress_level = compress_level
        self.file_num = 0
        self.total_size = sum(entry.size for entry in self.files)
        self.finished_size = 0
        self.transferred = 0
        self._file: Optional[BinaryIO] = None

    @classmethod
    def new_write(cls, job_id: int, path: PathLike, files: list[FileEntry]) -> "TransferJob":
        """A job that writes the given files below ``path``."""
        return cls(job_id, path, files)

    @classmethod
    def new_read(cls, job_id: int, path: PathLike, include_hidden: bool = False) -> "TransferJob":
        """A job that reads every file below ``path``."""
        return cls(job_id, path, get_recursive_files(path, include_hidden))

    def _join(self, name: str) -> str:
        return os.path.join(self.path, name) if name else self.path

    def _current_target(self) -> Optional[tuple[FileEntry, str]]:
        if self.file_num < len(self.files):
            entry = self.files[self.file_num]
            return entry, self._join(entry.name)
        return None

    def modify_time(self) -> None:
        """Move the current file's download into place and set its modification time."""
        target = self._current_target()
        if target is None:
            return
        entry, path = target
        try:
            os.replace(path + _DOWNLOAD_SUFFIX, path)
        except OSError:
            pass
        try:
            atime = os.stat(path).st_atime
            os.utime(path, (atime, entry.modified_time))
        except OSError:
            pass

    def remove_download_file(self) -> None:
        """Delete the current file's partial download, if any."""
        target = self._current_target()
        if target is None:
            return
        try:
            os.remove(target[1] + _DOWNLOAD_SUFFIX)
        except OSError:
            pass

    def _close_file(self, sync: bool) -> None:
        if self._file is None:
            return
        try:
            if sync:
                self._file.flush()
                os.fsync(self._file.fileno())
        finally:
            self._file.close()
            self._file = None

    def write(self, block: FileTransferBlock) -> None:
        """Append a received block to its file, opening a new file when needed."""
        if block.id != self.id:
            raise TransferError("Wrong id")
        if not 0 <= block.file_num < len(self.files):
            raise TransferError("Wrong file number")
        if block.file_num != self.file_num or self._file is None:
            self._close_file(sync=True)
            self.modify_time()
            self.file_num = block.file_num
            path = self._join(self.files[self.file_num].name)
            parent = os.path.dirname(path)
            if parent:
                try:
                    os.makedirs(parent, exist_ok=True)
                except OSError:
                    pass
            self._file = open(path + _DOWNLOAD_SUFFIX, "wb")
        data = decompress(block.data) if block.compressed else bytes(block.data)
        self._file.write(data)
        self.finished_size += len(data)
        self.transferred += len(block.data)

    def read(self) -> Optional[FileTransferBlock]:
        """Return the next block, or ``None`` when every file has been read.

        A block with empty data marks the end of a file. If a file cannot be
        opened or read, the job moves on to the next file and the error is
        raised.
        """
        file_num = self.file_num
        if file_num >= len(self.files):
            self._close_file(sync=False)
            return None
        name = self.files[file_num].name
        if self._file is None:
            try:
                self._file = open(self._join(name), "rb")
            except OSError:
                self.file_num += 1
                raise
        try:
            buf = self._file.read(BUF_SIZE)
        except OSError:
            self.file_num += 1
            self._close_file(sync=False)
            raise
        compressed = False
        if not buf:
            self.file_num += 1
            self._close_file(sync=False)
        else:
            self.finished_size += len(buf)
            if not _is_compressed_file(name):
                packed = compress(buf, self.compress_level)
                if len(packed) < len(buf):
                    buf = packed
                    compressed = True
            self.transferred += len(buf)
        return FileTransferBlock(id=self.id, file_num=file_num, data=buf, compressed=compressed)

    def close(self) -> None:
        """Flush and close the file currently open, if any."""
        self._close_file(sync=True)

    def __enter__(self) -> "TransferJob":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def remove_all_empty_dir(path: PathLike) -> None:
    """Remove ``path`` and every directory below it that holds no files.

    Symbolic links found on the way are removed too.
    """
    path_str = os.fspath(path)
    for entry in read_dir(path_str, True).entries:
        child = os.path.join(path_str, entry.name)
        if entry.entry_type is FileType.DIR:
            try:
                remove_all_empty_dir(child)
            except OSError:
                pass
        elif entry.entry_type in (FileType.DIR_LINK, FileType.FILE_LINK):
            try:
                os.remove(child)
            except OSError:
                pass
    try:
        os.rmdir(path_str)
    except OSError:
        pass


def remove_file(path: PathLike) -> None:
    """Delete a file."""
    os.remove(path)


def create_dir(path: PathLike) -> None:
    """Create a directory and any missing parents."""
    os.makedirs(path, exist_ok=True)