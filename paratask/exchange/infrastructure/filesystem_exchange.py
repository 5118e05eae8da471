"""Filesystem-based exchange channel implementation."""

import logging
import pickle
import shutil
import tempfile
from pathlib import Path

from uuid6 import uuid7

from paratask.exceptions import ExchangeError
from paratask.exchange.domain.exchange_payload import ExchangePayload
from paratask.exchange.domain.exchange_port import ExchangePort

logger = logging.getLogger(__name__)

PAYLOAD_SUFFIX = ".pkl"


def default_base_path() -> Path:
    """Directory used when no base path is configured: {tempdir}/paratask."""
    return Path(tempfile.gettempdir()) / "paratask"


class FilesystemExchange(ExchangePort):
    """
    Filesystem-based implementation of ExchangePort.

    Stores payloads as pickle files in a directory structure:
    {base_path}/{run_id}/{uuid7}_{task_index}.pkl

    uuid7 combines a millisecond timestamp with random bits, so locations
    never collide across tasks, invocations or concurrent orchestrators.
    """

    def __init__(self, base_path: str | Path | None = None) -> None:
        """
        Initialize filesystem exchange.

        Args:
            base_path: Base directory for payloads (default: {tempdir}/paratask).
        """
        if base_path is None:
            base_path = default_base_path()
        self.base_path = Path(base_path).expanduser().resolve()
        logger.debug(f"Initialized FilesystemExchange with base_path={self.base_path}")

    def _get_run_dir(self, run_id: str) -> Path:
        """
        Get the directory path for an invocation's payloads.

        Args:
            run_id: Run identifier.

        Returns:
            Path object for the run directory.
        """
        return self.base_path / run_id

    def write(self, run_id: str, task_index: int, payload: ExchangePayload) -> str:
        """
        Write a payload to the filesystem.

        Args:
            run_id: Unique identifier for the orchestrate() invocation.
            task_index: Position of the task in the caller's list.
            payload: Payload to store (must be picklable).

        Returns:
            Absolute path to the payload file.

        Raises:
            ExchangeError: If the file cannot be written or the payload is not picklable.
        """
        path = self._get_run_dir(run_id) / f"{uuid7()}_{task_index}{PAYLOAD_SUFFIX}"

        try:
            data = pickle.dumps(payload, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            logger.error(f"Failed to pickle payload for task {payload.task_name}: {e}")
            raise ExchangeError(f"Payload is not picklable: {e}") from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write payload to {path}: {e}")
            raise ExchangeError(f"Failed to write payload: {e}") from e

        logger.debug(f"Wrote payload: task={payload.task_name}, index={task_index}, path={path}")
        return str(path)

    def read(self, location: str) -> ExchangePayload:
        """
        Read a payload from the filesystem and delete its file.

        The file is removed before decoding, so a malformed payload is
        consumed as well.

        Args:
            location: Path returned by write().

        Returns:
            The stored payload.

        Raises:
            ExchangeError: If the file is missing, unreadable or malformed.
        """
        path = Path(location)

        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise ExchangeError(f"Payload not found: {location}") from e
        except OSError as e:
            logger.error(f"Failed to read payload from {path}: {e}")
            raise ExchangeError(f"Failed to read payload: {e}") from e

        # This process is the only consumer of the payload
        self.delete(location)

        # Malformed input is not limited to UnpicklingError
        try:
            payload = pickle.loads(data)
        except (
            pickle.UnpicklingError,
            EOFError,
            AttributeError,
            ImportError,
            IndexError,
            ValueError,
        ) as e:
            raise ExchangeError(f"Unable to unpickle payload {location}: {e}") from e

        if not isinstance(payload, ExchangePayload):
            raise ExchangeError(
                f"Payload {location} holds {type(payload).__name__}, expected ExchangePayload"
            )

        logger.debug(f"Read payload: task={payload.task_name}, path={path}")
        return payload

    def exists(self, location: str) -> bool:
        """
        Check if a payload file exists.

        Args:
            location: Path returned by write().

        Returns:
            True if payload file exists, False otherwise.
        """
        path = Path(location)
        return path.exists() and path.is_file()

    def delete(self, location: str) -> bool:
        """
        Delete a payload file.

        Args:
            location: Path returned by write().

        Returns:
            True if deletion succeeded, False if the file didn't exist.

        Raises:
            ExchangeError: If the file exists but cannot be removed.
        """
        try:
            Path(location).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete payload at {location}: {e}")
            raise ExchangeError(f"Failed to delete payload: {e}") from e

        logger.debug(f"Deleted payload: path={location}")
        return True

    def clear_run(self, run_id: str) -> int:
        """
        Delete the directory of one invocation and anything left in it.

        Args:
            run_id: Unique identifier for the orchestrate() invocation.

        Returns:
            Number of payload files deleted.

        Raises:
            ExchangeError: If the directory cannot be removed.
        """
        run_dir = self._get_run_dir(run_id)

        if not run_dir.exists():
            return 0

        count = sum(1 for _ in run_dir.glob(f"*{PAYLOAD_SUFFIX}"))

        try:
            shutil.rmtree(run_dir)
        except OSError as e:
            logger.error(f"Failed to clear run directory {run_dir}: {e}")
            raise ExchangeError(f"Failed to clear run: {e}") from e

        if count:
            logger.warning(f"Cleared run directory: {run_dir} ({count} leftover payloads)")
        return count
