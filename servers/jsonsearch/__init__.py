"""JSON search MCP server."""
