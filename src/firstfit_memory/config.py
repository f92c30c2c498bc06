from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidArgument

DEFAULT_MAX_BLOCKS = 50
DEFAULT_MAX_PROCESSES = 50
DEFAULT_MAX_WAIT_QUEUE = 50


@dataclass(frozen=True)
class SystemLimits:
    """
    Structural bounds of one simulated system.

    max_processes caps the number of simultaneously active processes; slots of
    freed processes are reclaimed.
    """

    max_blocks: int = DEFAULT_MAX_BLOCKS
    max_processes: int = DEFAULT_MAX_PROCESSES
    max_wait_queue: int = DEFAULT_MAX_WAIT_QUEUE

    def __post_init__(self) -> None:
        for name in ("max_blocks", "max_processes", "max_wait_queue"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")
