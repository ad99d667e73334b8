"""
Generic HTTP connector.
"""

from .http_connector import HttpConnector

__all__ = ["HttpConnector"]
