import os

import pytest

from hbbkit.compress import compress
from hbbkit.fs import (
    BUF_SIZE,
    FileEntry,
    FileTransferBlock,
    FileType,
    TransferError,
    TransferJob,
    create_dir,
    get_recursive_files,
    read_dir,
    remove_all_empty_dir,
    remove_file,
)

MTIME = 1_600_000_000


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "src"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"alpha" * 200)
    (root / ".hidden").write_bytes(b"h")
    (root / "sub" / "b.bin").write_bytes(bytes(range(256)) * 1200)
    (root / "sub" / "deep" / "c.zip").write_bytes(b"zip" * 50)
    (root / "sub" / "empty").write_bytes(b"")
    for p in root.rglob("*"):
        if p.is_file():
            os.utime(p, (MTIME, MTIME))
    return root


def by_name(entries):
    return {e.name: e for e in entries}


def test_read_dir_types_sizes_and_hidden(tree):
    listing = read_dir(tree)
    entries = by_name(listing.entries)
    assert listing.path == str(tree)
    assert set(entries) == {"a.txt", "sub"}
    assert entries["a.txt"].entry_type is FileType.FILE
    assert entries["a.txt"].size == 1000
    assert entries["a.txt"].modified_time == MTIME
    assert entries["sub"].entry_type is FileType.DIR
    assert entries["sub"].size == 0

    with_hidden = by_name(read_dir(tree, True).entries)
    assert with_hidden[".hidden"].is_hidden is True
    assert with_hidden["a.txt"].is_hidden is False


def test_read_dir_reports_links(tmp_path):
    (tmp_path / "d").mkdir()
    (tmp_path / "f").write_bytes(b"1234")
    os.symlink(tmp_path / "d", tmp_path / "dlink")
    os.symlink(tmp_path / "f", tmp_path / "flink")
    entries = by_name(read_dir(tmp_path).entries)
    assert entries["dlink"].entry_type is FileType.DIR_LINK
    assert entries["flink"].entry_type is FileType.FILE_LINK
    assert entries["flink"].size == 0


def test_read_dir_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_dir(tmp_path / "nope")


def test_recursive_files_relative_names(tree):
    files = by_name(get_recursive_files(tree))
    expected = {
        "a.txt",
        os.path.join("sub", "b.bin"),
        os.path.join("sub", "empty"),
        os.path.join("sub", "deep", "c.zip"),
    }
    assert set(files) == expected
    assert all(e.entry_type is FileType.FILE for e in files.values())
    assert ".hidden" in by_name(get_recursive_files(tree, True))


def test_recursive_files_single_file_and_missing(tree):
    files = get_recursive_files(tree / "a.txt")
    assert len(files) == 1
    assert files[0].name == ""
    assert files[0].size == 1000
    assert files[0].modified_time == MTIME
    with pytest.raises(FileNotFoundError):
        get_recursive_files(tree / "missing")


def transfer(reader, writer):
    blocks = []
    while (block := reader.read()) is not None:
        blocks.append(block)
        writer.write(block)
    writer.close()
    writer.modify_time()
    return blocks


def test_round_trip_copies_tree(tree, tmp_path):
    reader = TransferJob.new_read(7, tree)
    assert reader.total_size == sum(e.size for e in reader.files)
    dest = tmp_path / "dst"
    writer = TransferJob.new_write(7, dest, reader.files)
    blocks = transfer(reader, writer)

    for entry in reader.files:
        copied = dest / entry.name
        assert copied.read_bytes() == (tree / entry.name).read_bytes()
        assert int(copied.stat().st_mtime) == MTIME
        assert not os.path.exists(str(copied) + ".download")
    assert reader.finished_size == reader.total_size
    assert writer.finished_size == reader.total_size
    assert writer.transferred == reader.transferred
    assert all(len(b.data) <= BUF_SIZE for b in blocks)
    assert max(b.file_num for b in blocks) == len(reader.files) - 1


def test_compression_choice(tree):
    reader = TransferJob.new_read(1, tree)
    names = [e.name for e in reader.files]
    seen = {}
    while (block := reader.read()) is not None:
        if block.data:
            seen.setdefault(names[block.file_num], block)
    assert seen["a.txt"].compressed is True
    assert len(seen["a.txt"].data) < 1000
    zip_name = os.path.join("sub", "deep", "c.zip")
    assert seen[zip_name].compressed is False
    assert seen[zip_name].data == b"zip" * 50


def test_write_compressed_block(tmp_path):
    payload = b"hello" * 100
    packed = compress(payload, 0)
    with TransferJob.new_write(3, tmp_path, [FileEntry(name="out.txt", size=len(payload))]) as job:
        job.write(FileTransferBlock(id=3, file_num=0, data=packed, compressed=True))
        assert job.finished_size == len(payload)
        assert job.transferred == len(packed)
    assert (tmp_path / "out.txt.download").read_bytes() == payload
    job.remove_download_file()
    assert not (tmp_path / "out.txt.download").exists()


def test_write_rejects_wrong_id_and_file_number(tmp_path):
    job = TransferJob.new_write(1, tmp_path, [FileEntry(name="a", size=1)])
    with pytest.raises(TransferError):
        job.write(FileTransferBlock(id=2, file_num=0, data=b"x"))
    with pytest.raises(TransferError):
        job.write(FileTransferBlock(id=1, file_num=1, data=b"x"))
    assert job.finished_size == 0


def test_read_missing_file_skips_it(tmp_path):
    (tmp_path / "ok").write_bytes(b"data")
    files = [FileEntry(name="gone", size=1), FileEntry(name="ok", size=4)]
    job = TransferJob(5, tmp_path, files)
    with pytest.raises(OSError):
        job.read()
    assert job.file_num == 1
    block = job.read()
    assert block.file_num == 1
    assert block.data == b"data" or block.compressed


def test_remove_all_empty_dir(tmp_path):
    base = tmp_path / "a"
    (base / "b" / "x").mkdir(parents=True)
    (base / "c").mkdir()
    (base / "c" / "keep").write_bytes(b"k")
    os.symlink(tmp_path, base / "link")
    remove_all_empty_dir(base)
    assert not (base / "b").exists()
    assert not os.path.lexists(base / "link")
    assert (base / "c" / "keep").exists()

    empty = tmp_path / "e" / "f"
    empty.mkdir(parents=True)
    remove_all_empty_dir(tmp_path / "e")
    assert not (tmp_path / "e").exists()


def test_create_and_remove(tmp_path):
    target = tmp_path / "x" / "y"
    create_dir(target)
    assert target.is_dir()
    f = target / "f"
    f.write_bytes(b"1")
    remove_file(f)
    assert not f.exists()
    with pytest.raises(FileNotFoundError):
        remove_file(f)