import os
from pathlib import Path
from types import TracebackType

from compta_preprocessing.logging.logger import Log
from compta_preprocessing.preprocessing.exceptions import PersistenceError, RunInProgressError

LOCK_FILENAME = ".preprocessing.lock"


class TenantRunLock:
    """Exclusive run marker for one tenant, held for the whole run.

    The marker is created with ``O_CREAT | O_EXCL`` so that two processes
    cannot both hold it. A stale marker left by a crashed run must be removed
    by hand.
    """

    def __init__(self, tenant_dir: Path, enabled: bool = True) -> None:
        self._path = tenant_dir / LOCK_FILENAME
        self._enabled = enabled
        self._held = False

    @property
    def path(self) -> Path:
        return self._path

    def acquire(self) -> None:
        """Raises RunInProgressError if another run holds the marker."""
        if not self._enabled or self._held:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as exc:
            raise RunInProgressError(
                f"Another preprocessing run holds {self._path}"
            ) from exc
        except OSError as exc:
            raise PersistenceError(f"Cannot create run lock {self._path}: {exc}") from exc
        with os.fdopen(fd, "w") as handle:
            handle.write(str(os.getpid()))
        self._held = True
        Log.debug(f"Acquired run lock {self._path}")

    def release(self) -> None:
        if not self._held:
            return
        self._path.unlink(missing_ok=True)
        self._held = False
        Log.debug(f"Released run lock {self._path}")

    def __enter__(self) -> "TenantRunLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
