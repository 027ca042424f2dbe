"""
Google Forms MCP Server utility modules.
"""

import sys


def log(message: str, level: str = "INFO") -> None:
    """Log a message to stderr.

    stdout is reserved for MCP JSON-RPC traffic, so nothing here may
    ever print to it. Non-INFO messages are prefixed with their level.
    """
    prefix = "" if level == "INFO" else f"[{level}] "
    print(f"{prefix}{message}", file=sys.stderr)
