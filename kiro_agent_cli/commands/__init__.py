"""CLI commands."""

from .config import config
from .create import create_cmd
from .install import install_cmd
from .install import uninstall_cmd
from .list_cmd import list_cmd
from .mcp import mcp
from .search import info_cmd
from .search import search_cmd

__all__ = [
    "config",
    "create_cmd",
    "info_cmd",
    "install_cmd",
    "list_cmd",
    "mcp",
    "search_cmd",
    "uninstall_cmd",
]
