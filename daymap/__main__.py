# daymap/__main__.py
"""
Entry point for the daymap MCP server.

CRITICAL: Server imports configure_logging() first to prevent stdout pollution.
"""

import asyncio
import logging

# Import server (which configures logging before anything else)
from daymap.server import get_workspace, mcp

logger = logging.getLogger(__name__)


async def main() -> None:
    """Open the project store, then serve MCP over stdio."""
    get_workspace()

    logger.info("Starting MCP server on stdio transport")
    await mcp.run_stdio_async()


if __name__ == "__main__":
    asyncio.run(main())
