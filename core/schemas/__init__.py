"""
Module 01 - Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Format constants
from .versioning import (
    IPFS_CID_TYPE,
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    PRIMARY_FILENAME,
    WEIGHT_SUM_TOLERANCE,
)

# Error models and exceptions
from .errors import (
    ContentStoreError,
    CorruptArchiveError,
    DuplicateReferenceNameError,
    ErrorCodes,
    EvaluationPollTimeoutError,
    FetchExhaustedError,
    JuryPackError,
    JuryPackException,
    ManifestError,
    MissingManifestError,
    MissingReferentError,
    PackageError,
    PrimaryDocumentError,
    TimeoutFinalizeError,
    TransactionRevertedError,
    UnsupportedPrimaryReferenceError,
)

# Manifest wire schema
from .manifest import (
    AdditionalEntry,
    AINode,
    JuryParameters,
    Manifest,
    PrimaryReference,
    SupportEntry,
)

# Package values
from .package import (
    DEFAULT_JURY_NODE,
    AdditionalFile,
    ExternalReference,
    JuryConfig,
    JuryNode,
    PackageDetails,
    PrimaryDecode,
    PrimaryDocument,
    SupportingFile,
)

# Evaluation values
from .evaluation import (
    EvaluationOutcome,
    EvaluationRecord,
    EvaluationRequest,
    EvaluationResult,
    EvaluationStatus,
)

__all__ = [
    # Versioning
    "IPFS_CID_TYPE",
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "PRIMARY_FILENAME",
    "WEIGHT_SUM_TOLERANCE",
    # Errors
    "ContentStoreError",
    "CorruptArchiveError",
    "DuplicateReferenceNameError",
    "ErrorCodes",
    "EvaluationPollTimeoutError",
    "FetchExhaustedError",
    "JuryPackError",
    "JuryPackException",
    "ManifestError",
    "MissingManifestError",
    "MissingReferentError",
    "PackageError",
    "PrimaryDocumentError",
    "TimeoutFinalizeError",
    "TransactionRevertedError",
    "UnsupportedPrimaryReferenceError",
    # Manifest
    "AdditionalEntry",
    "AINode",
    "JuryParameters",
    "Manifest",
    "PrimaryReference",
    "SupportEntry",
    # Package
    "DEFAULT_JURY_NODE",
    "AdditionalFile",
    "ExternalReference",
    "JuryConfig",
    "JuryNode",
    "PackageDetails",
    "PrimaryDecode",
    "PrimaryDocument",
    "SupportingFile",
    # Evaluation
    "EvaluationOutcome",
    "EvaluationRecord",
    "EvaluationRequest",
    "EvaluationResult",
    "EvaluationStatus",
]
