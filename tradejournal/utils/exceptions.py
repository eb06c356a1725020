from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    DATA = "data"


class JournalError(Exception):
    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.DATA,
        status_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.category.value}] {self.message}"]
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " | ".join(parts)


class AuthenticationError(JournalError):
    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, ErrorCategory.AUTHENTICATION, 401)


class ValidationError(JournalError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.VALIDATION, 400)


class TradeNotFoundError(JournalError):
    def __init__(self, trade_id: str) -> None:
        self.trade_id = trade_id
        super().__init__(f"Trade not found: {trade_id}", ErrorCategory.NOT_FOUND, 404)


class JournalEntryNotFoundError(JournalError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Journal entry not found: {entry_id}", ErrorCategory.NOT_FOUND, 404)


class StorageError(JournalError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.STORAGE, 500)
