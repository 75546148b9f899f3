"""
Evaluation Retrieval

Fetching from the content store, parsing evaluation results, and racing
result polling against the on-chain timeout finalizer.
"""

from evaluation.fetcher import (
    CID_LIST_DELIMITER,
    RetryingFetcher,
    first_cid,
)

from evaluation.result_parser import ResultParser

from evaluation.justification import (
    LOADING_ERROR_PREFIX,
    JustificationLoader,
    merge_pages,
    split_cids,
)

from evaluation.ledger import (
    BENIGN_REVERT_PATTERN,
    EvaluationLedger,
    is_benign_finalize_revert,
    revert_reason,
)

from evaluation.race import (
    UNREADABLE_RECORD_TEXT,
    EvaluationRaceController,
)

from evaluation.runner import (
    PACKAGE_UPLOAD_NAME,
    QueryRunner,
)

__all__ = [
    # Fetcher
    "CID_LIST_DELIMITER",
    "RetryingFetcher",
    "first_cid",
    # Parser
    "ResultParser",
    # Justification pages
    "LOADING_ERROR_PREFIX",
    "JustificationLoader",
    "merge_pages",
    "split_cids",
    # Ledger
    "BENIGN_REVERT_PATTERN",
    "EvaluationLedger",
    "is_benign_finalize_revert",
    "revert_reason",
    # Race
    "UNREADABLE_RECORD_TEXT",
    "EvaluationRaceController",
    # Runner
    "PACKAGE_UPLOAD_NAME",
    "QueryRunner",
]
