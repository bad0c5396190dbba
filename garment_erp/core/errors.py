from __future__ import annotations

from typing import Any, Optional


class BusinessRuleError(Exception):
    """
    Raised by services when a request violates a business rule.

    The API layer renders it through the standardized error envelope with
    error type 'business_rule_error' and the status code carried here.
    """

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(BusinessRuleError):
    """A referenced row does not exist."""

    status_code = 404


class ConflictError(BusinessRuleError):
    """The request conflicts with current state (duplicates, already processed rows)."""

    status_code = 409
