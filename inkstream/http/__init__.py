"""HTTP API layer for Inkstream.

This module provides FastAPI integration: a router that exposes a generation
session as a server-sent event stream.
"""
