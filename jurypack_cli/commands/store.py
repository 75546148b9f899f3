"""
CLI Store Commands

Publish files to the content store and read evaluation results back.

Usage:
    jurypack upload package.zip [--json]
    jurypack result <justification-cid> [--json]
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.http import HttpClient
from core.schemas.errors import ContentStoreError, FetchExhaustedError
from core.schemas.evaluation import EvaluationResult
from core.store import IpfsContentStore

from evaluation.fetcher import RetryingFetcher
from evaluation.justification import JustificationLoader
from evaluation.result_parser import ResultParser


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def build_store(runtime: RuntimeConfig) -> IpfsContentStore:
    """Create the IPFS store described by the runtime config."""
    http = HttpClient(timeout=runtime.store.timeout, proxy=runtime.proxy)
    return IpfsContentStore(
        gateway=runtime.store.gateway,
        pinning_service=runtime.store.pinning_service,
        pinning_key=runtime.store.pinning_key,
        http=http,
    )


def build_fetcher(store: IpfsContentStore, runtime: RuntimeConfig) -> RetryingFetcher:
    return RetryingFetcher(
        store,
        max_retries=runtime.fetch.max_retries,
        backoff_ms=runtime.fetch.backoff_ms,
    )


@dataclass
class UploadSummary:
    """Summary of an upload for CLI output."""
    path: str = ""
    cid: str = ""
    bytes: int = 0
    gateway_url: str = ""
    success: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["error"] is None:
            del d["error"]
        return d


@dataclass
class ResultSummary:
    """Parsed evaluation result for CLI output."""
    cid: str = ""
    scores: list[Any] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    justification: str = ""
    timestamp: str | None = None
    pages: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_result(cls, cid: str, result: EvaluationResult) -> "ResultSummary":
        return cls(
            cid=cid,
            scores=list(result.outcome_scores),
            labels=list(result.outcome_labels),
            justification=result.justification_text,
            timestamp=result.timestamp,
            pages=list(result.pages),
        )

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["error"] is None:
            del d["error"]
        return d


async def _upload(runtime: RuntimeConfig, path: Path) -> UploadSummary:
    data = path.read_bytes()
    async with build_store(runtime) as store:
        cid = await store.upload(data, path.name)
        return UploadSummary(
            path=str(path),
            cid=cid,
            bytes=len(data),
            gateway_url=store.gateway_url(cid),
            success=True,
        )


def upload_cmd(args: Namespace) -> int:
    """
    Execute the upload command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    path = Path(args.path)
    runtime = args.cli_config.runtime

    if not path.is_file():
        summary = UploadSummary(path=str(path), error=f"File not found: {path}")
    else:
        try:
            summary = asyncio.run(_upload(runtime, path))
        except ContentStoreError as e:
            summary = UploadSummary(path=str(path), error=str(e))

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    elif summary.success:
        print(f"Uploaded: {summary.path} ({summary.bytes} bytes)")
        print(f"cid: {summary.cid}")
        print(f"url: {summary.gateway_url}")
    else:
        print(f"Upload failed: {summary.error}", file=sys.stderr)

    return EXIT_SUCCESS if summary.success else EXIT_RUNTIME_ERROR


async def _fetch_result(runtime: RuntimeConfig, cid: str) -> EvaluationResult:
    async with build_store(runtime) as store:
        loader = JustificationLoader(build_fetcher(store, runtime), ResultParser())
        return await loader.load(cid, strict=True)


def print_result_human(summary: ResultSummary) -> None:
    print(f"cid: {summary.cid}")
    if summary.timestamp:
        print(f"timestamp: {summary.timestamp}")
    if summary.scores:
        print("scores:")
        labels = summary.labels or [""] * len(summary.scores)
        for index, (label, score) in enumerate(zip(labels, summary.scores), start=1):
            print(f"  {label or f'outcome {index}'}: {score}")
    if len(summary.pages) > 1:
        for index, page in enumerate(summary.pages, start=1):
            print("")
            print(f"--- page {index} of {len(summary.pages)} ---")
            print(page)
        return
    print("")
    print(summary.justification)


def result_cmd(args: Namespace) -> int:
    """Execute the result command."""
    runtime = args.cli_config.runtime

    try:
        result = asyncio.run(_fetch_result(runtime, args.cid))
    except (FetchExhaustedError, ValueError) as e:
        summary = ResultSummary(cid=args.cid, error=str(e))
        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = ResultSummary.from_result(args.cid.strip(), result)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_result_human(summary)
    return EXIT_SUCCESS
