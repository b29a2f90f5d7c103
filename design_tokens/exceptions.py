"""
Exception hierarchy for the token engine.

Bad individual samples never raise; these cover contract violations
between stages and malformed top-level payloads.
"""

from typing import Optional, Dict, Any


class DesignTokenError(Exception):
    """Base exception for all engine errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


# === Clustering exceptions ===

class ClusteringError(DesignTokenError):
    """Clustering stage failed"""
    pass


class ClusteringPreconditionError(ClusteringError):
    """Input colors were not sorted by descending weight"""
    pass


# === Input exceptions ===

class InputFormatError(DesignTokenError):
    """Top-level payload has the wrong shape"""
    pass
