"""
NanoDB: Networked In-Memory Key-Value Store

A small key-value server built with Python asyncio. Clients authenticate
with a shared token over raw TCP and store JSON values with optional
expiration.
"""

__version__ = "1.0.0"
