"""
Google Forms MCP Server

A Model Context Protocol (MCP) server for the Google Forms API.
Lets AI assistants inspect forms and edit them through validated,
atomic batches of item and settings operations.
"""

__version__ = "1.0.0"
