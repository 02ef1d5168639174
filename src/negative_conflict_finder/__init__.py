"""Negative Conflict Finder.

Finds Google Ads negative keywords that block positive keywords, served as a
Model Context Protocol server.
"""

__version__ = "1.0.0"

from negative_conflict_finder.server import create_mcp_server

__all__ = ["create_mcp_server"]
