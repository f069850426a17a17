# -*- coding: utf-8 -*-
"""Exceptions raised by the extraction engine and the tree walker."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "I18nExtractError",
    "ScriptParseError",
    "SourceTreeError",
]


class I18nExtractError(Exception):
    """Base exception for vue-zh-i18n."""


class ScriptParseError(I18nExtractError):
    """Raised when a script unit does not parse; the unit cannot be rewritten."""

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        dialect: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.dialect = dialect

    def __str__(self) -> str:
        msg = super().__str__()
        if self.line is not None:
            msg = f"{msg} (line {self.line}, column {self.column})"
        return msg


class SourceTreeError(I18nExtractError):
    """Raised when the input tree cannot be read; aborts the whole run."""
