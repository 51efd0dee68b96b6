# daymap/models/__init__.py
"""
Data models for daymap.

Provides the Project/Task entities, blob storage, the persistence adapter,
and the in-memory workspace that commits to it.
"""

from daymap.models.entities import (
    Priority,
    Project,
    ProjectDraft,
    Task,
    TaskType,
    generate_id,
)
from daymap.models.persistence import ProjectPersistence
from daymap.models.storage import BlobStore, FileBlobStore, InMemoryBlobStore
from daymap.models.workspace import ProjectWorkspace

__all__ = [
    # Entities
    "Priority",
    "Project",
    "ProjectDraft",
    "Task",
    "TaskType",
    "generate_id",
    # Storage
    "BlobStore",
    "FileBlobStore",
    "InMemoryBlobStore",
    "ProjectPersistence",
    "ProjectWorkspace",
]
