"""Service-level constants shared across modules."""
from __future__ import annotations


class StoreStatus:
    STORED = "STORED"
