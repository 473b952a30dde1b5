"""Tests for incremental asset synchronization."""

import hashlib
import json
import os

import pytest

from helpers import write_tree
from mllt.assets import MANIFEST_NAME, file_signature, scan_assets, sync_assets
from mllt.assets import sync


@pytest.fixture
def dirs(tmp_path):
    assets = tmp_path / "assets"
    output = tmp_path / "output"
    write_tree(
        assets,
        {
            "css/site.css": "body{}",
            "img/logo.svg": "<svg/>",
            "robots.txt": "User-agent: *",
        },
    )
    return assets, output


def manifest(output):
    return json.loads((output / MANIFEST_NAME).read_text(encoding="utf-8"))["files"]


def test_first_sync_copies_everything(dirs):
    assets, output = dirs

    report = sync_assets(assets, output)

    assert report.copied == ["css/site.css", "img/logo.svg", "robots.txt"]
    assert report.errors == []
    assert (output / "css" / "site.css").read_text(encoding="utf-8") == "body{}"
    assert manifest(output) == ["css/site.css", "img/logo.svg", "robots.txt"]


def test_second_sync_copies_nothing(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    before = {path: path.stat().st_mtime_ns for path in output.rglob("*") if path.is_file()}

    report = sync_assets(assets, output)

    assert report.copied == []
    assert report.skipped == ["css/site.css", "img/logo.svg", "robots.txt"]
    after = {path: path.stat().st_mtime_ns for path in output.rglob("*") if path.is_file()}
    assert after == before


def test_one_modified_file_is_the_only_copy(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    changed = assets / "img" / "logo.svg"
    changed.write_text("<svg>changed</svg>", encoding="utf-8")
    stat = changed.stat()
    os.utime(changed, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

    report = sync_assets(assets, output)

    assert report.copied == ["img/logo.svg"]
    assert (output / "img" / "logo.svg").read_text(encoding="utf-8") == "<svg>changed</svg>"


def test_output_edit_is_restored(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    (output / "robots.txt").write_text("tampered", encoding="utf-8")

    report = sync_assets(assets, output)

    assert report.copied == ["robots.txt"]
    assert (output / "robots.txt").read_text(encoding="utf-8") == "User-agent: *"


def test_prune_only_touches_previously_copied_files(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    write_tree(output, {"unrelated.txt": "keep me", "img/other.png": "keep too"})
    (assets / "robots.txt").unlink()
    (assets / "img" / "logo.svg").unlink()

    report = sync_assets(assets, output)

    assert report.pruned == ["img/logo.svg", "robots.txt"]
    assert not (output / "robots.txt").exists()
    assert not (output / "img" / "logo.svg").exists()
    assert (output / "unrelated.txt").read_text(encoding="utf-8") == "keep me"
    assert (output / "img" / "other.png").exists()
    assert manifest(output) == ["css/site.css"]


def test_prune_removes_emptied_directories(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    (assets / "img" / "logo.svg").unlink()

    sync_assets(assets, output)

    assert not (output / "img").exists()
    assert output.is_dir()


def test_no_prune_keeps_stale_files_recorded(dirs):
    assets, output = dirs
    sync_assets(assets, output)
    (assets / "robots.txt").unlink()

    report = sync_assets(assets, output, prune=False)

    assert report.pruned == []
    assert (output / "robots.txt").exists()
    assert "robots.txt" in manifest(output)


def test_protected_paths_never_pruned(tmp_path):
    assets = tmp_path / "assets"
    assets.mkdir()
    output = tmp_path / "output"
    write_tree(output, {"index.html": "page"})
    (output / MANIFEST_NAME).write_text(
        json.dumps({"version": 1, "files": ["index.html", "../outside.txt"]}),
        encoding="utf-8",
    )
    (tmp_path / "outside.txt").write_text("outside", encoding="utf-8")

    sync_assets(assets, output, protected={"index.html"})

    assert (output / "index.html").read_text(encoding="utf-8") == "page"
    assert (tmp_path / "outside.txt").exists()


def test_copy_failure_does_not_stop_other_entries(dirs):
    assets, output = dirs
    # a file where the css/ directory has to go
    write_tree(output, {"css": "in the way"})

    report = sync_assets(assets, output, jobs=2)

    assert [error.relative_path for error in report.errors] == ["css/site.css"]
    assert report.copied == ["img/logo.svg", "robots.txt"]
    assert "css/site.css" not in manifest(output)


def test_checksum_mode_ignores_touch(dirs):
    assets, output = dirs
    sync_assets(assets, output, checksum=True)
    touched = assets / "robots.txt"
    stat = touched.stat()
    os.utime(touched, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))

    assert sync_assets(assets, output, checksum=True).copied == []
    assert sync_assets(assets, output).copied == ["robots.txt"]


def test_missing_or_unset_assets_dir(tmp_path):
    assert sync_assets(None, tmp_path / "output").copied == []
    assert sync_assets(tmp_path / "nope", tmp_path / "output").copied == []
    assert not (tmp_path / "output").exists()


def test_scan_assets_signatures(dirs):
    assets, _ = dirs

    entries, errors = scan_assets(assets)

    assert errors == []

    assert [entry.relative_path for entry in entries] == ["css/site.css", "img/logo.svg", "robots.txt"]
    assert entries[0].signature == file_signature(assets / "css" / "site.css")
    assert file_signature(assets / "robots.txt", checksum=True) == hashlib.sha256(
        b"User-agent: *"
    ).hexdigest()


def test_unreadable_source_does_not_stop_other_entries(dirs, monkeypatch):
    assets, output = dirs
    sync_assets(assets, output, checksum=True)
    unreadable = assets / "img" / "logo.svg"
    real_signature = sync.file_signature

    def failing_signature(path, checksum=False):
        if path == unreadable:
            raise OSError(5, "Input/output error")
        return real_signature(path, checksum)

    monkeypatch.setattr(sync, "file_signature", failing_signature)
    (assets / "robots.txt").write_text("Disallow: /", encoding="utf-8")

    report = sync_assets(assets, output, checksum=True)

    assert [error.relative_path for error in report.errors] == ["img/logo.svg"]
    assert "Input/output error" in str(report.errors[0])
    assert report.copied == ["robots.txt"]
    assert report.pruned == []
    assert (output / "img" / "logo.svg").exists()
    assert manifest(output) == ["css/site.css", "img/logo.svg", "robots.txt"]
