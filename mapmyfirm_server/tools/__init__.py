"""
Tools Module - MCP Tool Implementations

MCP tools for scanning, sitemap browsing, hub matching and checklists.
"""

from mapmyfirm_server.tools import scan_site
from mapmyfirm_server.tools import list_content_types
from mapmyfirm_server.tools import get_site_tree
from mapmyfirm_server.tools import search_site_tree
from mapmyfirm_server.tools import match_locations
from mapmyfirm_server.tools import generate_checklist
from mapmyfirm_server.tools import export_checklist_csv

__all__ = [
    "scan_site",
    "list_content_types",
    "get_site_tree",
    "search_site_tree",
    "match_locations",
    "generate_checklist",
    "export_checklist_csv",
]
