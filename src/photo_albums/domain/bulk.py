"""Domain models for bulk photo operations."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class BulkFailure:
    """A single item that could not be processed."""

    photo_id: UUID
    error: str


@dataclass
class BulkDeleteReport:
    """Outcome of a bulk delete."""

    succeeded: list[UUID] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return not self.succeeded and bool(self.failed)


@dataclass
class BulkMoveReport:
    """Outcome of a bulk move.

    ``conflicted`` lists photos that kept changing album under concurrent
    writes and were left where they are.
    """

    target_album_id: UUID
    moved: list[UUID] = field(default_factory=list)
    already_in_target: list[UUID] = field(default_factory=list)
    not_found: list[UUID] = field(default_factory=list)
    conflicted: list[UUID] = field(default_factory=list)
