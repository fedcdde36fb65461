"""
absint_domains/errors.py
════════════════════════

Exception raised when a domain is handed state it cannot have produced.

Imprecision is never an error: undecidable results degrade to ⊤ or to
``Satisfiability.UNKNOWN``.  ``DomainComputationError`` only signals a
malformed collaborator (e.g. two environments over different value
classes, or a product paired with a foreign operand).
"""

from __future__ import annotations

from typing import Any, Optional


class DomainComputationError(Exception):
    """A domain operation received structurally inconsistent operands."""

    def __init__(self, message: str, *, operand: Optional[Any] = None) -> None:
        super().__init__(message)
        self.operand = operand

    def __str__(self) -> str:
        base = super().__str__()
        if self.operand is None:
            return base
        return f"{base} (operand: {self.operand!r})"


__all__ = ["DomainComputationError"]
