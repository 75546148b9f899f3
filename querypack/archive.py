"""
Query Package Archive
File: archive.py

Purpose: Create and extract the zip container holding manifest.json plus
the package's named byte blobs. No knowledge of manifest semantics beyond
serializing it.
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
import zlib
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from core.schemas.errors import CorruptArchiveError
from core.schemas.manifest import Manifest
from core.schemas.versioning import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

# Fixed entry timestamp so identical inputs give identical containers
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

MIME_TYPES = {
    "txt": "text/plain",
    "json": "application/json",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "csv": "text/csv",
    "html": "text/html",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "webm": "video/webm",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_content_type(name: str) -> str:
    """Map a file name's extension to a MIME type."""
    if "." not in name:
        return DEFAULT_MIME_TYPE
    ext = name.rsplit(".", 1)[1].lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


@dataclass(frozen=True)
class ArchiveEntry:
    """A named blob inside the container."""
    name: str
    data: bytes
    content_type: str = DEFAULT_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)

    def text(self) -> str:
        return self.data.decode("utf-8")


def _serialize_manifest(manifest: Manifest | Mapping[str, Any]) -> bytes:
    data = manifest.to_dict() if isinstance(manifest, Manifest) else dict(manifest)
    return json.dumps(data, indent=2).encode("utf-8")


class ArchiveCodec:
    """
    Stateless zip codec for query packages.

    Usage:
        codec = ArchiveCodec()
        blob = codec.create([("primary_query.json", b"{...}")], manifest)
        entries = codec.extract(blob)
    """

    def __init__(self, *, compression_level: int = 6) -> None:
        self.compression_level = compression_level

    def create(
        self,
        files: Iterable[tuple[str, bytes] | ArchiveEntry],
        manifest: Manifest | Mapping[str, Any],
    ) -> bytes:
        """
        Serialize `manifest` as manifest.json plus each file under its name.

        Names are stored exactly as given. A name used twice, or a file named
        like the reserved manifest entry, raises ValueError.
        """
        pairs: list[tuple[str, bytes]] = []
        seen = {MANIFEST_FILENAME}
        for item in files:
            name, data = (item.name, item.data) if isinstance(item, ArchiveEntry) else item
            if name == MANIFEST_FILENAME:
                raise ValueError(f"{MANIFEST_FILENAME} is reserved for the manifest")
            if name in seen:
                raise ValueError(f"Duplicate archive entry name: {name!r}")
            seen.add(name)
            pairs.append((name, bytes(data)))

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            self._write_entry(zf, MANIFEST_FILENAME, _serialize_manifest(manifest))
            for name, data in pairs:
                self._write_entry(zf, name, data)

        blob = buffer.getvalue()
        logger.debug("Created archive with %d entries (%d bytes)", len(pairs) + 1, len(blob))
        return blob

    def _write_entry(self, zf: zipfile.ZipFile, name: str, data: bytes) -> None:
        info = zipfile.ZipInfo(name, date_time=_ZIP_EPOCH)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        zf.writestr(info, data, compresslevel=self.compression_level)

    def extract(self, container: bytes) -> list[ArchiveEntry]:
        """
        Return all non-directory entries in archive order.

        Raises:
            CorruptArchiveError: the bytes are not a readable zip container
        """
        try:
            with zipfile.ZipFile(io.BytesIO(container), "r") as zf:
                entries = [
                    ArchiveEntry(
                        name=info.filename,
                        data=zf.read(info),
                        content_type=guess_content_type(info.filename),
                    )
                    for info in zf.infolist()
                    if not info.is_dir()
                ]
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error,
                EOFError, NotImplementedError, ValueError) as e:
            raise CorruptArchiveError(str(e) or e.__class__.__name__) from e

        logger.info("Extracted %d files from archive", len(entries))
        return entries


def find_entry(entries: Iterable[ArchiveEntry], name: str) -> ArchiveEntry | None:
    """Look up an entry by exact name."""
    for entry in entries:
        if entry.name == name:
            return entry
    return None


__all__ = [
    "MIME_TYPES",
    "DEFAULT_MIME_TYPE",
    "ArchiveEntry",
    "ArchiveCodec",
    "guess_content_type",
    "find_entry",
]
