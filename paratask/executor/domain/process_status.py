"""Worker process status enumeration."""

from enum import StrEnum, auto


class ProcessStatus(StrEnum):
    """Represents where a worker process is in its lifecycle.

    Attributes:
        SPAWNED: Process started and has not terminated
        KILLED: Process was terminated through its handle
        EXITED: Process exited on its own
    """

    SPAWNED = auto()
    KILLED = auto()
    EXITED = auto()

    def is_terminal(self) -> bool:
        """Check if this status is terminal (the process is gone or going).

        Returns:
            True if status is KILLED or EXITED
        """
        return self in (ProcessStatus.KILLED, ProcessStatus.EXITED)
