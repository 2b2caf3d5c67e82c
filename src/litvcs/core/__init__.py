"""Core engine layer for lit.

This module provides the business logic for version control operations:
references and HEAD, drift computation, staging, checkout and the
repository handle tying them together.
"""

from litvcs.core.checkout import CheckoutCoordinator
from litvcs.core.refs import HeadState, RefManager
from litvcs.core.repository import Repository
from litvcs.core.staging import StagingManager
from litvcs.core.status import ChangeType, DiffEngine, StatusReport, compare_snapshots

__all__ = [
    "Repository",
    "HeadState",
    "RefManager",
    "StagingManager",
    "ChangeType",
    "DiffEngine",
    "StatusReport",
    "compare_snapshots",
    "CheckoutCoordinator",
]
