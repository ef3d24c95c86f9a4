""" Value types exchanged with the canvas. """

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class Connection:
    """A proposed edge, before it gets an id."""
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None


@dataclass(frozen=True)
class ConnectionCheck:
    valid: bool
    reason: Optional[str] = None  # user-facing, only set for rejections worth explaining

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    severity: Literal["error", "warning"]
    node_id: Optional[str] = None
    edge_id: Optional[str] = None
