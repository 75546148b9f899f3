"""
CLI Package Commands

Build a query package from local files and inspect existing packages.

Usage:
    jurypack build --query-file query.json --file notes.txt:"Field notes" \\
        --cid rulebook=QmXyz:"Rulebook" --jury jury.yaml --out package.zip
    jurypack inspect package.zip [--json]
    jurypack inspect <cid> [--json]
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

import yaml
from pydantic import ValidationError

from core.config import RuntimeConfig
from core.schemas.errors import PackageError
from core.schemas.package import (
    ExternalReference,
    JuryConfig,
    PackageDetails,
    SupportingFile,
)

from querypack.assembler import Hyperlink, PackageAssembler
from querypack.reader import PackageReader, decode_primary

from jurypack_cli.commands.store import build_fetcher, build_store


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VALIDATION_FAILED = 2


@dataclass
class BuildSummary:
    """Summary of package creation for CLI output."""
    output_path: str = ""
    query: str = ""
    files: list[str] = field(default_factory=list)
    additional: list[str] = field(default_factory=list)
    bytes: int = 0
    success: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["error"] is None:
            del d["error"]
        return d


def parse_file_arg(value: str) -> tuple[Path, str]:
    """Split `PATH[:DESC]`."""
    path, _, description = value.partition(":")
    return Path(path), description


def parse_cid_arg(value: str) -> ExternalReference:
    """Split `NAME=CID[:DESC]`."""
    name, sep, rest = value.partition("=")
    if not sep or not name or not rest:
        raise ValueError(f"Expected NAME=CID[:DESC], got: {value!r}")
    cid, _, description = rest.partition(":")
    return ExternalReference(cid=cid, name=name, description=description)


def parse_link_arg(value: str) -> Hyperlink:
    """Split `URL [DESC]` on the first whitespace."""
    parts = value.strip().split(None, 1)
    if not parts:
        raise ValueError("Empty --link value")
    return Hyperlink(url=parts[0], description=parts[1] if len(parts) > 1 else "")


def load_jury_file(path: Path) -> JuryConfig:
    """Load a jury config from JSON or YAML."""
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return JuryConfig.model_validate(data)


def _print_build_summary(summary: BuildSummary, output_json: bool) -> None:
    if output_json:
        print(json.dumps(summary.to_dict(), indent=2))
    elif summary.success:
        print(f"Created package: {summary.output_path} ({summary.bytes} bytes)")
        print(f"query: {summary.query}")
        print(f"files: {', '.join(summary.files)}")
        if summary.additional:
            print(f"additional: {', '.join(summary.additional)}")
    else:
        print("Failed to build package", file=sys.stderr)
        print(f"Error: {summary.error}", file=sys.stderr)


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    out_path = Path(args.out)
    summary = BuildSummary(output_path=str(out_path))
    runtime: RuntimeConfig = args.cli_config.runtime

    query_path = Path(args.query_file)
    if not query_path.is_file():
        summary.error = f"Query file not found: {query_path}"
        _print_build_summary(summary, args.json)
        return EXIT_RUNTIME_ERROR

    try:
        supporting = []
        for value in args.file or []:
            path, description = parse_file_arg(value)
            supporting.append(
                SupportingFile(filename=path.name, data=path.read_bytes(), description=description)
            )
        external = [parse_cid_arg(value) for value in args.cid or []]
        links = [parse_link_arg(value) for value in args.link or []]
        jury = load_jury_file(Path(args.jury)) if args.jury else None
    except (OSError, ValueError, yaml.YAMLError) as e:
        # ValidationError is a ValueError; a bad jury file is a package error
        summary.error = str(e)
        _print_build_summary(summary, args.json)
        return EXIT_VALIDATION_FAILED if isinstance(e, ValidationError) else EXIT_RUNTIME_ERROR

    try:
        primary = decode_primary(query_path.read_bytes(), query_path.name).document
        assembler = PackageAssembler(
            primary_filename=runtime.package.primary_filename,
            manifest_version=runtime.package.manifest_version,
        )
        package = assembler.assemble(
            primary, supporting, external, jury,
            support_cids=args.support or (),
            links=links,
        )
        blob = assembler.codec.create(package.files, package.manifest)
    except PackageError as e:
        summary.error = str(e)
        _print_build_summary(summary, args.json)
        return EXIT_VALIDATION_FAILED

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(blob)

    summary.query = package.primary.query
    summary.files = package.filenames
    summary.additional = [entry.name for entry in package.manifest.additional or ()]
    summary.bytes = len(blob)
    summary.success = True
    _print_build_summary(summary, args.json)
    return EXIT_SUCCESS


async def _fetch_details(runtime: RuntimeConfig, cid: str) -> PackageDetails:
    async with build_store(runtime) as store:
        blob = await build_fetcher(store, runtime).fetch(cid, is_query_package=True)
    return PackageReader().read_archive(blob)


def print_details_human(source: str, details: PackageDetails) -> None:
    print(f"package: {source}")
    print(f"query: {details.query}")
    if details.outcomes:
        print(f"outcomes: {', '.join(details.outcomes)}")
    print(f"number_of_outcomes: {details.number_of_outcomes}")
    print(f"iterations: {details.iterations}")
    print("jury:")
    for node in details.jury_nodes:
        print(f"  - {node.provider}/{node.model} runs={node.runs} weight={node.weight}")
    if details.references:
        print(f"references: {', '.join(details.references)}")
    for f in details.additional:
        where = f.entry.filename if f.entry.is_local else f.entry.hash
        print(f"  [{f.entry.name}] {f.entry.type} {where}")
        if f.entry.description:
            print(f"      {f.entry.description}")
    if details.support:
        print(f"support: {', '.join(s.hash for s in details.support)}")


def inspect_cmd(args: Namespace) -> int:
    """Execute the inspect command on a local zip or a CID."""
    source = args.source
    path = Path(source)

    try:
        if path.is_file():
            details = PackageReader().read_archive(path.read_bytes())
        else:
            details = asyncio.run(_fetch_details(args.cli_config.runtime, source))
    except PackageError as e:
        if args.json:
            print(json.dumps({"source": source, "valid": False, "error": e.to_error_model().model_dump()}, indent=2))
        else:
            print(f"Invalid package: {e}", file=sys.stderr)
        return EXIT_VALIDATION_FAILED

    if args.json:
        print(json.dumps({"source": source, "valid": True, **details.summary()}, indent=2))
    else:
        print_details_human(source, details)
    return EXIT_SUCCESS
