"""Shared response shapes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorSourceOut(BaseModel):
    path: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errorSources: list[ErrorSourceOut]
    error: Any | None = None
    stack: str | None = None


class MessageResponse(BaseModel):
    message: str
