"""
Module 01 - Schemas
File: versioning.py

Purpose: Centralize manifest format constants.
Kept free of imports from other schema files to avoid circular dependencies.
"""

# Version written into every manifest produced by the assembler
MANIFEST_VERSION: str = "1.0"

# Reserved archive entry holding the manifest
MANIFEST_FILENAME: str = "manifest.json"

# Default name of the primary document inside a package
PRIMARY_FILENAME: str = "primary_query.json"

# Manifest `type` for additional entries that live in the content store
IPFS_CID_TYPE: str = "ipfs/cid"

# Tolerance for the AI node weight sum
WEIGHT_SUM_TOLERANCE: float = 1e-4
