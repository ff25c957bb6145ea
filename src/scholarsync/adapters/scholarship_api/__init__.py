"""Public interface for the scholarship API adapter."""

from __future__ import annotations

from .client import ScholarshipApiFetcher, records_from_payload

__all__ = ["ScholarshipApiFetcher", "records_from_payload"]
