"""Per-practitioner write serialization."""

import asyncio
import weakref

# asyncio.Lock binds to the loop that first waits on it, so locks are kept per
# running loop and dropped with it.
_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]]" = (
    weakref.WeakKeyDictionary()
)


def practitioner_lock(practitioner_id: str) -> asyncio.Lock:
    """Return the single mutation lock guarding one practitioner's calendar."""
    registry = _locks.setdefault(asyncio.get_running_loop(), {})
    lock = registry.get(practitioner_id)
    if lock is None:
        lock = registry[practitioner_id] = asyncio.Lock()
    return lock
