"""
JuryPack CLI

Command-line interface for building, inspecting and publishing jury query
packages.

Usage:
    python -m jurypack_cli build --query-file query.json --out package.zip
    python -m jurypack_cli inspect package.zip
    python -m jurypack_cli upload package.zip
    python -m jurypack_cli result <cid>
    python -m jurypack_cli config --init
"""

__version__ = "0.1.0"
