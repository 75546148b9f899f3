"""
Test fixtures package for JuryPack tests.

This package provides factory functions and fakes for creating test
objects. Everything lives in common.py.

Usage:
    from fixtures.common import make_primary_document, FakeLedger

    def test_something():
        primary = make_primary_document(query="Did it rain?")
"""

from .common import (
    FakeContentStore,
    FakeLedger,
    RecordingSleep,
    make_external_reference,
    make_jury_config,
    make_justification,
    make_manifest_data,
    make_primary_document,
    make_supporting_file,
    make_weighted_nodes,
)

__all__ = [
    # Factories
    "make_primary_document",
    "make_jury_config",
    "make_supporting_file",
    "make_external_reference",
    "make_manifest_data",
    "make_weighted_nodes",
    "make_justification",
    # Fakes
    "FakeContentStore",
    "FakeLedger",
    "RecordingSleep",
]
