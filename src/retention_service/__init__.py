"""
Blob retention service.

Serves stored shares and assets over HTTP and garbage-collects the ones
whose retention has lapsed.
"""

__version__ = "0.1.0"
