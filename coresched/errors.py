from __future__ import annotations


class SchedulerContractError(RuntimeError):
    """Raised when the engine is driven in a way its callers promised not to."""
