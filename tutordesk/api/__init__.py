"""
API module for the reference classes REST API.
"""

from .rest_api import ClassesRestAPI

__all__ = [
    "ClassesRestAPI",
]
