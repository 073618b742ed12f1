"""Exception hierarchy for tmsync.

The fetch client raises the ApiError family; importers catch them at their
public boundary and report failure as a ``None`` / empty result.
"""

from __future__ import annotations


class TmsyncError(Exception):
    """Base class for all tmsync errors."""


class ApiError(TmsyncError):
    """Any failure talking to the Transfermarkt API."""


class ApiUnavailable(ApiError):
    """The availability probe failed. The API is down or rate limiting us."""


class InvalidResponse(ApiError):
    """The API answered with an empty or non-JSON body."""


class RequestFailed(ApiError):
    """Transport-level failure of the real request."""


class NotFound(RequestFailed):
    """The upstream endpoint returned 404. The API shape may have changed."""
