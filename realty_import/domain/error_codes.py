from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок импорта.
    """

    FILE_EMPTY = "FILE_EMPTY"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    HEADERS_NOT_FOUND = "HEADERS_NOT_FOUND"
    REQUIRED_FIELD_MISSING = "REQUIRED_FIELD_MISSING"
    INVALID_PRICE = "INVALID_PRICE"
    INVALID_COMMISSION_RATE = "INVALID_COMMISSION_RATE"
    INVALID_COMMISSION_AMOUNT = "INVALID_COMMISSION_AMOUNT"
    INVALID_SIDE = "INVALID_SIDE"
    CLIENT_NOT_FOUND = "CLIENT_NOT_FOUND"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

    @property
    def is_file_level(self) -> bool:
        return self in (ErrorCode.FILE_EMPTY, ErrorCode.FILE_READ_ERROR, ErrorCode.HEADERS_NOT_FOUND)
