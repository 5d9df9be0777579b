"""
MapMyFirm MCP Server - Main Entry Point

FastMCP server with STDIO and SSE transport support.
"""

import argparse
from fastmcp import FastMCP

from mapmyfirm_server.config import get_settings, setup_logging

# Import tools (will be registered with decorators)
from mapmyfirm_server.tools import (
    scan_site,
    list_content_types,
    get_site_tree,
    search_site_tree,
    match_locations,
    generate_checklist,
    export_checklist_csv,
)


def create_app() -> FastMCP:
    """Create and configure the MCP application."""
    mcp = FastMCP(
        name="mapmyfirm",
        instructions=(
            "Scan a law firm's WordPress site, match its business locations to "
            "location hub pages, and track which practice area pages exist "
            "under each hub."
        ),
    )

    # Register all tools
    mcp.mount(scan_site.router)
    mcp.mount(list_content_types.router)
    mcp.mount(get_site_tree.router)
    mcp.mount(search_site_tree.router)
    mcp.mount(match_locations.router)
    mcp.mount(generate_checklist.router)
    mcp.mount(export_checklist_csv.router)

    return mcp


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="MapMyFirm MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse"],
        default=None,
        help="Transport protocol (default: from env)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for SSE transport (default: from env)"
    )
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings)
    transport = args.transport or settings.mcp.transport
    port = args.port or settings.mcp.port

    mcp = create_app()

    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport="sse", host=settings.mcp.host, port=port)


if __name__ == "__main__":
    main()
