"""Stable error codes shared by outcomes and typed errors."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_NAME_DUPLICATE = "PRODUCT_NAME_DUPLICATE"
    PRODUCT_ID_MISMATCH = "PRODUCT_ID_MISMATCH"

    DATABASE_ERROR = "DATABASE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
