from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Optional

from .job import Job
from .policies import OrderingRule


class OrderedJobSet:
    """Job identifiers kept in policy order.

    The comparator reads live job attributes on every insert, but members
    already in the set are never re-sorted. A rank is only valid until the
    next mutation.
    """

    def __init__(self, rule: OrderingRule, lookup: Callable[[int], Job]) -> None:
        self._rule = rule
        self._lookup = lookup
        self._ids: list[int] = []

    def insert(self, job_id: int) -> int:
        candidate = self._lookup(job_id)
        rank = len(self._ids)
        for index, member_id in enumerate(self._ids):
            if self._rule.outranks(candidate, self._lookup(member_id)):
                rank = index
                break
        self._ids.insert(rank, job_id)
        return rank

    def at(self, rank: int) -> Job:
        return self._lookup(self._ids[rank])

    def remove_at(self, rank: int) -> Job:
        return self._lookup(self._ids.pop(rank))

    def rank_of(self, job_id: int) -> int:
        return self._ids.index(job_id)

    def peek_first(self) -> Optional[Job]:
        if not self._ids:
            return None
        return self.at(0)

    def size(self) -> int:
        return len(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Job]:
        return (self._lookup(job_id) for job_id in list(self._ids))
