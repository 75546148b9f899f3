"""
HTTP transport shared by the content store adapters.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = ["HttpClient", "HttpError", "HttpResponse"]
