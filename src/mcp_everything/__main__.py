"""Allow ``python -m mcp_everything``."""

from .cli import main

main()
