"""Language filter applied to a fetched repository listing."""

from __future__ import annotations

from typing import Sequence

from devfinder.models.github import RepositoryRecord

NO_FILTER = ""


def project(records: Sequence[RepositoryRecord], criterion: str) -> tuple[RepositoryRecord, ...]:
    """Return the records whose language equals `criterion`, in their original order.

    An empty criterion means no filter is active and every record is kept.
    Records without a language never match a non-empty criterion.
    """
    if criterion == NO_FILTER:
        return tuple(records)
    return tuple(record for record in records if record.language == criterion)


def available_languages(records: Sequence[RepositoryRecord]) -> tuple[str, ...]:
    """Distinct languages in first-seen order, skipping records without one."""
    seen: dict[str, None] = {}
    for record in records:
        if record.language:
            seen.setdefault(record.language, None)
    return tuple(seen)


class MemoizedProjection:
    """Caches the last projection and rebuilds it only when its inputs change.

    The records collection is compared by identity because controllers hand
    out a fresh tuple for every resolved fetch; the criterion by value.
    """

    def __init__(self) -> None:
        self._records: Sequence[RepositoryRecord] | None = None
        self._criterion: str | None = None
        self._result: tuple[RepositoryRecord, ...] = ()
        self.recomputations = 0

    def __call__(self, records: Sequence[RepositoryRecord], criterion: str) -> tuple[RepositoryRecord, ...]:
        if records is self._records and criterion == self._criterion:
            return self._result

        self._records = records
        self._criterion = criterion
        self._result = project(records, criterion)
        self.recomputations += 1
        return self._result
