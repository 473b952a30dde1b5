"""Incremental mirroring of the assets tree into the output directory."""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

from ..core.errors import AssetCopyError
from ..core.models import AssetEntry, SyncReport
from ..rendering.io import atomic_write_text

logger = logging.getLogger(__name__)

MANIFEST_NAME = ".mllt-assets.json"
MANIFEST_VERSION = 1


def file_signature(path: Path, checksum: bool = False) -> str:
    """Return the freshness signature of a file.

    Size and modification time by default, SHA-256 of the content when
    ``checksum`` is set.
    """
    if checksum:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    stat = path.stat()
    return f"{stat.st_size}:{stat.st_mtime_ns}"


def scan_assets(
    assets_root: Path, checksum: bool = False
) -> tuple[list[AssetEntry], list[AssetCopyError]]:
    """List every file below ``assets_root``, sorted by relative path.

    Files whose signature cannot be read are returned as errors instead.
    """
    entries = []
    errors = []
    for path in sorted(assets_root.rglob("*")):
        if not path.is_file():
            continue
        relative_path = path.relative_to(assets_root).as_posix()
        try:
            signature = file_signature(path, checksum)
        except OSError as e:
            errors.append(AssetCopyError(relative_path, f"read failed: {e}"))
            continue
        entries.append(
            AssetEntry(
                relative_path=relative_path, source_path=path, signature=signature
            )
        )
    return entries, errors


def load_manifest(output_dir: Path) -> set[str]:
    """Return the asset paths a previous sync recorded in ``output_dir``."""
    path = output_dir / MANIFEST_NAME
    if not path.exists():
        return set()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable asset manifest {path}: {e}")
        return set()
    if not isinstance(data, dict) or data.get("version") != MANIFEST_VERSION:
        logger.warning(f"Ignoring asset manifest with unknown format: {path}")
        return set()
    return {item for item in data.get("files", []) if isinstance(item, str)}


def write_manifest(output_dir: Path, files: Iterable[str]) -> None:
    data = {"version": MANIFEST_VERSION, "files": sorted(files)}
    atomic_write_text(
        output_dir / MANIFEST_NAME, json.dumps(data, indent=2, ensure_ascii=True)
    )


def _inside(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def needs_copy(entry: AssetEntry, output_dir: Path, checksum: bool = False) -> bool:
    """Return True when the output copy of ``entry`` is missing or stale."""
    target = output_dir / entry.relative_path
    if not target.is_file():
        return True
    return file_signature(target, checksum) != entry.signature


def copy_asset(entry: AssetEntry, output_dir: Path) -> Path:
    """Copy one asset into the output tree, preserving its metadata."""
    target = output_dir / entry.relative_path
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(entry.source_path, target)
    except OSError as e:
        raise AssetCopyError(entry.relative_path, f"copy failed: {e}") from e
    logger.debug(f"Copied: {target}")
    return target


def _sync_entry(
    entry: AssetEntry, output_dir: Path, checksum: bool
) -> tuple[str, AssetCopyError | None]:
    try:
        if not needs_copy(entry, output_dir, checksum):
            logger.debug(f"Skipped (unchanged): {entry.relative_path}")
            return "skipped", None
    except OSError as e:
        return "failed", AssetCopyError(entry.relative_path, f"stat failed: {e}")
    try:
        copy_asset(entry, output_dir)
    except AssetCopyError as e:
        return "failed", e
    return "copied", None


def _remove_empty_parents(path: Path, output_dir: Path) -> None:
    parent = path.parent
    root = output_dir.resolve()
    while parent.resolve() != root and _inside(parent, root):
        try:
            parent.rmdir()
        except OSError:
            # not empty
            break
        parent = parent.parent


def prune_stale(
    output_dir: Path, stale: Iterable[str], report: SyncReport
) -> None:
    """Delete previously copied assets whose source no longer exists."""
    for relative_path in sorted(stale):
        target = output_dir / relative_path
        if not _inside(target, output_dir):
            logger.warning(f"Refusing to prune path outside output: {relative_path}")
            continue
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            report.errors.append(AssetCopyError(relative_path, f"prune failed: {e}"))
            continue
        _remove_empty_parents(target, output_dir)
        report.pruned.append(relative_path)
        logger.debug(f"Pruned: {target}")


def sync_assets(
    assets_root: Path | None,
    output_dir: Path,
    *,
    prune: bool = True,
    checksum: bool = False,
    protected: Iterable[str] = (),
    jobs: int = 1,
) -> SyncReport:
    """Mirror ``assets_root`` onto ``output_dir``.

    Only missing or changed files are copied. With ``prune``, files that
    an earlier sync copied and whose source has since disappeared are
    deleted; nothing else in the output is ever removed.

    Args:
        assets_root: Assets directory, or None for no assets
        output_dir: Output root
        prune: Delete stale files recorded in the asset manifest
        checksum: Compare content hashes instead of size and mtime
        protected: Output-relative paths that must never be pruned
        jobs: Worker thread count

    Returns:
        Per-entry outcome, including accumulated copy failures
    """
    report = SyncReport()
    if assets_root is None:
        logger.info("No assets folder specified! Skipping...")
        return report
    if not assets_root.is_dir():
        logger.warning(f"Assets directory not found: {assets_root}")
        return report

    logger.info("Copying static assets...")
    output_dir.mkdir(parents=True, exist_ok=True)
    protected = set(protected)
    entries, scan_errors = scan_assets(assets_root, checksum)
    report.errors.extend(scan_errors)
    previous = load_manifest(output_dir)

    for entry in entries:
        if entry.relative_path in protected:
            logger.warning(f"Asset {entry.relative_path} overwrites a rendered page")

    with ThreadPoolExecutor(max_workers=max(1, jobs)) as executor:
        outcomes = list(
            executor.map(lambda entry: _sync_entry(entry, output_dir, checksum), entries)
        )

    present: set[str] = set()
    for entry, (status, error) in zip(entries, outcomes):
        if status == "copied":
            report.copied.append(entry.relative_path)
            present.add(entry.relative_path)
        elif status == "skipped":
            report.skipped.append(entry.relative_path)
            present.add(entry.relative_path)
        else:
            report.errors.append(error)

    current = {entry.relative_path for entry in entries}
    current |= {error.relative_path for error in scan_errors}
    if prune:
        prune_stale(output_dir, previous - current - protected, report)
    else:
        present |= previous - current

    # failed copies and prunes may still leave our file in place
    present |= {error.relative_path for error in report.errors} & previous
    present -= protected
    if present != previous:
        write_manifest(output_dir, present)

    logger.info(
        f"Assets: {len(report.copied)} copied, {len(report.skipped)} unchanged, "
        f"{len(report.pruned)} pruned, {len(report.errors)} failed"
    )
    return report
