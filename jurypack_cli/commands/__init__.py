"""
CLI command modules.
"""

from jurypack_cli.commands import package, store

__all__ = ["package", "store"]
