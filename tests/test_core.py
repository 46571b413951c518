import io
import os
import sys
import pytest
from pathlib import Path
from datetime import datetime
from PIL import Image
from open_dam.core import DamEngine, Empty, Initialized
from open_dam.exceptions import (
    AlreadyInitializedError, FileOperationError, IdentityError,
    LaunchError, NotFoundError, NotInitializedError, StoreError,
)
from open_dam.scanning.identity import IdentityComputer

MARCH_5 = datetime(2024, 3, 5, 14, 0, 0)

@pytest.fixture
def engine(tmp_path):
    eng = DamEngine.init(tmp_path)
    try:
        yield eng
    finally:
        eng.close()

def _make_image(path, created, size=(900, 900)):
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, "green").save(path, format="JPEG")
    ts = created.timestamp()
    os.utime(path, (ts, ts))
    return path

def test_check_empty_directory(tmp_path):
    status = DamEngine.check(tmp_path)
    assert isinstance(status, Empty)
    assert status.root == tmp_path.resolve()
    # Probing never creates the marker
    assert not (tmp_path / ".dam").exists()

def test_init_creates_one_marker_and_no_entries(tmp_path):
    with DamEngine.init(tmp_path) as eng:
        assert eng.list() == []

    assert [p.name for p in tmp_path.iterdir()] == [".dam"]
    status = DamEngine.check(tmp_path)
    assert isinstance(status, Initialized)
    status.engine.close()

def test_second_init_reports_already_set_up(tmp_path, make_file):
    with DamEngine.init(tmp_path) as eng:
        make_file(tmp_path / "photo.jpg", MARCH_5)
        eng.scan()
    before = (tmp_path / ".dam").read_bytes()

    with pytest.raises(AlreadyInitializedError):
        DamEngine.init(tmp_path)

    assert (tmp_path / ".dam").read_bytes() == before
    with DamEngine.load(tmp_path) as eng:
        assert len(eng.list()) == 1

def test_load_requires_marker(tmp_path):
    with pytest.raises(NotInitializedError):
        DamEngine.load(tmp_path)

def test_scan_relocates_and_records(engine, tmp_path, make_file):
    make_file(tmp_path / "photo.jpg", MARCH_5)

    assert engine.scan() == 1

    dest = tmp_path.resolve() / "2024" / "Mar_05" / "photo.jpg"
    assert dest.exists()
    assert not (tmp_path / "photo.jpg").exists()

    entries = engine.list()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.name == "photo.jpg"
    assert entry.path == dest
    assert entry.created == MARCH_5
    assert entry.id == IdentityComputer().compute_id("2024/Mar_05/photo.jpg")

def test_scan_twice_keeps_single_record(engine, tmp_path, make_file):
    make_file(tmp_path / "incoming" / "photo.jpg", MARCH_5)

    engine.scan()
    first = engine.list()
    engine.scan()
    second = engine.list()

    assert len(second) == 1
    assert second[0].id == first[0].id
    assert second[0].path == first[0].path
    # The emptied import folder is gone after the first scan
    assert not (tmp_path / "incoming").exists()

def test_scan_skips_hidden_and_store_files(engine, tmp_path, make_file):
    make_file(tmp_path / ".hidden" / "secret.jpg", MARCH_5)
    make_file(tmp_path / ".notes.txt", MARCH_5)

    assert engine.scan() == 0
    assert engine.list() == []
    assert (tmp_path / ".hidden" / "secret.jpg").exists()

def test_scan_stores_thumbnail_for_images_only(engine, tmp_path, make_file):
    _make_image(tmp_path / "pic.jpg", MARCH_5)
    make_file(tmp_path / "notes.txt", MARCH_5, b"plain text")

    engine.scan()

    pic = engine.info("pic")
    with Image.open(io.BytesIO(pic.thumbnail)) as thumb:
        assert thumb.width <= 600 and thumb.height <= 400

    notes = engine.info("notes")
    assert notes.thumbnail is None
    assert notes.path == tmp_path.resolve() / "2024" / "Mar_05" / "notes.txt"

def test_find(engine, tmp_path, make_file):
    make_file(tmp_path / "photo.jpg", MARCH_5)
    engine.scan()

    assert engine.find("oto").name == "photo.jpg"
    with pytest.raises(NotFoundError):
        engine.find("zzz")

@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
def test_untextual_path_aborts_scan(engine, tmp_path, make_file):
    bad = tmp_path / os.fsdecode(b"bad\xff.jpg")
    make_file(bad, MARCH_5)

    with pytest.raises(IdentityError):
        engine.scan()

    assert engine.list() == []
    # Nothing was moved either
    assert bad.exists()
    assert not (tmp_path / "2024").exists()

def test_scan_aborts_on_destination_clash(engine, tmp_path, make_file):
    make_file(tmp_path / "a" / "photo.jpg", MARCH_5, b"one")
    make_file(tmp_path / "b" / "photo.jpg", MARCH_5, b"two")

    with pytest.raises(FileOperationError):
        engine.scan()

    # The first file made it in before the clash
    assert len(engine.list()) == 1

def test_listing_failure_aborts_before_any_move(engine, tmp_path, make_file, monkeypatch):
    make_file(tmp_path / "photo.jpg", MARCH_5)
    make_file(tmp_path / "locked" / "inside.jpg", MARCH_5)

    import open_dam.scanning.filesystem as filesystem_module
    real_scandir = filesystem_module.os.scandir

    def scandir(path):
        if Path(path).name == "locked":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)
    monkeypatch.setattr(filesystem_module.os, "scandir", scandir)

    with pytest.raises(FileOperationError):
        engine.scan()

    assert (tmp_path / "photo.jpg").exists()
    assert not (tmp_path / "2024").exists()
    assert engine.list() == []

def test_store_failure_aborts_scan(engine, tmp_path, make_file):
    make_file(tmp_path / "a.jpg", MARCH_5)
    make_file(tmp_path / "b.jpg", MARCH_5)
    engine.store.conn.execute("DROP TABLE entry")

    with pytest.raises(StoreError):
        engine.scan()

    # Aborted on the first file, the second was never moved
    assert (tmp_path / "b.jpg").exists()

def test_add_file_from_outside_root(engine, tmp_path, make_file):
    outside = make_file(tmp_path.parent / f"{tmp_path.name}_inbox" / "clip.mov", MARCH_5)

    entry = engine.add(outside)

    assert entry.path == tmp_path.resolve() / "2024" / "Mar_05" / "clip.mov"
    assert not outside.exists()
    assert engine.find("clip").id == entry.id

def test_add_rejects_directories(engine, tmp_path):
    with pytest.raises(FileOperationError):
        engine.add(tmp_path)

def test_open_passes_resolved_path(tmp_path, make_file):
    opened = []
    with DamEngine.init(tmp_path, launcher=opened.append) as eng:
        make_file(tmp_path / "photo.jpg", MARCH_5)
        eng.scan()
        eng.open("photo")

    assert opened == [tmp_path.resolve() / "2024" / "Mar_05" / "photo.jpg"]

def test_open_launch_failure_leaves_engine_usable(tmp_path, make_file):
    def failing_launcher(path):
        raise LaunchError(f"no app for {path}")

    with DamEngine.init(tmp_path, launcher=failing_launcher) as eng:
        make_file(tmp_path / "photo.jpg", MARCH_5)
        eng.scan()
        with pytest.raises(LaunchError):
            eng.open("photo")
        assert eng.find("photo").name == "photo.jpg"
        with pytest.raises(NotFoundError):
            eng.open("zzz")
