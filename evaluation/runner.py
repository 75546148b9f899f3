"""
Query Runner
File: runner.py

Purpose: End-to-end flow from a query to its evaluation:
assemble -> archive -> upload -> request on-chain -> race for the result.

All collaborators are passed in; nothing here holds global state.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.config import RuntimeConfig
from core.schemas.evaluation import EvaluationOutcome, EvaluationRequest, EvaluationResult
from core.schemas.package import (
    ExternalReference,
    JuryConfig,
    PackageDetails,
    PrimaryDocument,
    SupportingFile,
)
from core.store import ContentStore

from querypack.archive import ArchiveCodec
from querypack.assembler import Hyperlink, PackageAssembler
from querypack.manifest import ManifestValidator
from querypack.reader import PackageReader

from evaluation.fetcher import RetryingFetcher
from evaluation.justification import JustificationLoader
from evaluation.ledger import EvaluationLedger
from evaluation.race import EvaluationRaceController
from evaluation.result_parser import ResultParser

logger = logging.getLogger(__name__)

PACKAGE_UPLOAD_NAME = "query_package.zip"


class QueryRunner:
    """
    Runs queries against the evaluation contract.

    Usage:
        runner = QueryRunner.from_config(store, ledger, RuntimeConfig.from_env())
        outcome = await runner.run_query(primary, supporting, external, jury)
    """

    def __init__(
        self,
        store: ContentStore,
        ledger: EvaluationLedger,
        *,
        fetcher: RetryingFetcher | None = None,
        controller: EvaluationRaceController | None = None,
        assembler: PackageAssembler | None = None,
        reader: PackageReader | None = None,
        parser: ResultParser | None = None,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self.fetcher = fetcher or RetryingFetcher(store)
        self.parser = parser or ResultParser()
        self.controller = controller or EvaluationRaceController(ledger, self.fetcher, self.parser)
        self.assembler = assembler or PackageAssembler()
        self.reader = reader or PackageReader()

    @classmethod
    def from_config(
        cls,
        store: ContentStore,
        ledger: EvaluationLedger,
        config: RuntimeConfig,
    ) -> "QueryRunner":
        codec = ArchiveCodec()
        validator = ManifestValidator()
        parser = ResultParser()
        fetcher = RetryingFetcher(
            store,
            max_retries=config.fetch.max_retries,
            backoff_ms=config.fetch.backoff_ms,
        )
        return cls(
            store,
            ledger,
            fetcher=fetcher,
            controller=EvaluationRaceController.from_config(ledger, fetcher, config, parser),
            assembler=PackageAssembler(
                codec=codec,
                validator=validator,
                primary_filename=config.package.primary_filename,
                manifest_version=config.package.manifest_version,
            ),
            reader=PackageReader(codec=codec, validator=validator),
            parser=parser,
        )

    async def submit_package(self, archive: bytes) -> EvaluationRequest:
        """Upload a package and open an on-chain request for it."""
        cid = await self.store.upload(archive, PACKAGE_UPLOAD_NAME)
        return await self.submit_cid(cid)

    async def submit_cid(self, cid: str) -> EvaluationRequest:
        """Open an on-chain request for an already uploaded package."""
        cid = cid.strip()
        request_id = await self.ledger.request_evaluation([cid])
        logger.info("Requested evaluation of %s: request id %s", cid, request_id)
        return EvaluationRequest(cid=cid, request_id=str(request_id))

    async def run_query(
        self,
        primary: PrimaryDocument,
        supporting_files: Sequence[SupportingFile] = (),
        external_refs: Sequence[ExternalReference] = (),
        jury: JuryConfig | None = None,
        *,
        links: Sequence[Hyperlink] | None = None,
    ) -> EvaluationOutcome:
        """Build, upload and evaluate a query package."""
        archive = self.assembler.build_archive(
            primary, supporting_files, external_refs, jury, links=links,
        )
        request = await self.submit_package(archive)
        return await self.controller.wait_for_fulfil_or_timeout(request)

    async def run_cid(self, cid: str) -> EvaluationOutcome:
        """Evaluate a package already in the content store."""
        request = await self.submit_cid(cid)
        return await self.controller.wait_for_fulfil_or_timeout(request)

    async def fetch_package_details(self, cid: str) -> PackageDetails:
        """Fetch a query package by CID and read it."""
        archive = await self.fetcher.fetch(cid, is_query_package=True)
        return self.reader.read_archive(archive)

    async def fetch_result(self, justification_cid: str) -> EvaluationResult:
        """
        Fetch and parse a justification, every page of a comma-joined CID.

        Raises:
            FetchExhaustedError: a page could not be fetched
        """
        loader = JustificationLoader(self.fetcher, self.parser)
        return await loader.load(justification_cid, strict=True)


__all__ = [
    "PACKAGE_UPLOAD_NAME",
    "QueryRunner",
]
