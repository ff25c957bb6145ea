"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FetchError, FetchResult, RawRecord, ScholarshipFetcher
from .locking import EditLock, NullEditLock
from .persistence import ReferenceTermRepository, Repository, ScholarshipRepository
from .queue import QueueItem, WorkQueue
from .unit_of_work import (
    RepositoryCollection,
    ScholarshipRepositories,
    ScholarshipUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "EditLock",
    "FetchError",
    "FetchResult",
    "NullEditLock",
    "QueueItem",
    "RawRecord",
    "ReferenceTermRepository",
    "Repository",
    "RepositoryCollection",
    "ScholarshipFetcher",
    "ScholarshipRepositories",
    "ScholarshipRepository",
    "ScholarshipUnitOfWork",
    "UnitOfWork",
    "WorkQueue",
]
