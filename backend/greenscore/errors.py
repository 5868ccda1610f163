# Overview: Domain exception hierarchy shared by services and routes.

"""
Marketplace error taxonomy.

Every service failure a caller can act on is one of these. Routes map them
to HTTP responses through ``status_code``; anything else is a 500.

- NotFoundError: referenced material/request/user/project does not exist.
- InsufficientQuantityError: requested amount exceeds available stock.
- EditConflictError: edit lock held by another active session.
- InvalidArgumentError: rejected input (same-project transfer, bad quantity,
  missing ids, illegal status transition).
- StorageFailure: the atomic commit failed; nothing was written.
"""
from __future__ import annotations


class MarketplaceError(Exception):
    """Base class for marketplace operation errors."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"success": False, "error": str(self), "details": self.details}


class NotFoundError(MarketplaceError):
    status_code = 404


class InsufficientQuantityError(MarketplaceError):
    status_code = 409


class EditConflictError(MarketplaceError):
    status_code = 409


class InvalidArgumentError(MarketplaceError, ValueError):
    status_code = 400


class StorageFailure(MarketplaceError):
    status_code = 500


class SameProjectError(InvalidArgumentError):
    """Internal transfer whose source and destination project are the same."""
