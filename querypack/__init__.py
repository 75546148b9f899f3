"""
Query Package Archive Protocol

Provides creation, extraction, validation and reading of query packages:
a zip container with a manifest.json describing a primary document,
bundled files and external references.
"""

from querypack.archive import (
    DEFAULT_MIME_TYPE,
    MIME_TYPES,
    ArchiveCodec,
    ArchiveEntry,
    find_entry,
    guess_content_type,
)

from querypack.manifest import (
    JURY_REQUIRED_KEYS,
    ManifestValidator,
)

from querypack.assembler import (
    AssembledPackage,
    Hyperlink,
    PackageAssembler,
    augment_query,
)

from querypack.reader import (
    DEFAULT_ITERATIONS,
    DEFAULT_NUMBER_OF_OUTCOMES,
    PackageReader,
    decode_primary,
)

__all__ = [
    # Archive
    "DEFAULT_MIME_TYPE",
    "MIME_TYPES",
    "ArchiveCodec",
    "ArchiveEntry",
    "find_entry",
    "guess_content_type",
    # Manifest
    "JURY_REQUIRED_KEYS",
    "ManifestValidator",
    # Assembler
    "AssembledPackage",
    "Hyperlink",
    "PackageAssembler",
    "augment_query",
    # Reader
    "DEFAULT_ITERATIONS",
    "DEFAULT_NUMBER_OF_OUTCOMES",
    "PackageReader",
    "decode_primary",
]
