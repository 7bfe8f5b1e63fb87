from __future__ import annotations

from typing import Optional


class CoreTable:
    """Busy/idle state of each core, indexed 0..count-1."""

    def __init__(self, count: int) -> None:
        if count <= 0:
            msg = "core count must be strictly positive"
            raise ValueError(msg)
        self._jobs: list[Optional[int]] = [None] * count

    def __len__(self) -> int:
        return len(self._jobs)

    def is_idle(self, core: int) -> bool:
        return self._jobs[self._check(core)] is None

    def job_on(self, core: int) -> Optional[int]:
        return self._jobs[self._check(core)]

    def set_busy(self, core: int, job_id: int) -> None:
        self._jobs[self._check(core)] = job_id

    def set_idle(self, core: int) -> None:
        self._jobs[self._check(core)] = None

    def first_idle(self) -> Optional[int]:
        for core, job_id in enumerate(self._jobs):
            if job_id is None:
                return core
        return None

    def busy_count(self) -> int:
        return sum(1 for job_id in self._jobs if job_id is not None)

    def _check(self, core: int) -> int:
        if not 0 <= core < len(self._jobs):
            msg = f"core {core} out of range 0..{len(self._jobs) - 1}"
            raise IndexError(msg)
        return core
