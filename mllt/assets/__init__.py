"""Static asset synchronization."""

from .sync import MANIFEST_NAME, file_signature, scan_assets, sync_assets

__all__ = ["MANIFEST_NAME", "file_signature", "scan_assets", "sync_assets"]
