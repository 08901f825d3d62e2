"""Best-effort exclusive lock on the xtables lock file."""

from __future__ import annotations

import fcntl
import os
import threading

XTABLES_LOCK_FILE_PATH = "/var/run/xtables.lock"
DEFAULT_FILE_PERM = 0o600


class XtablesLock:
    """An open handle on the xtables lock file.

    The file is opened (and created if needed) on construction, but the lock
    itself is only taken by :meth:`try_lock`. Closing the handle in
    :meth:`unlock` releases the lock.
    """

    def __init__(self, path: str = XTABLES_LOCK_FILE_PATH) -> None:
        self.path = path
        self._fd: int | None = os.open(path, os.O_CREAT | os.O_RDONLY, DEFAULT_FILE_PERM)
        self._mutex = threading.Lock()
        self._held = False

    @property
    def held(self) -> bool:
        """Whether this handle currently holds the file lock."""
        return self._held

    def try_lock(self) -> bool:
        """Take the lock without blocking.

        Returns False when another holder already has the lock; this is not an
        error. Any other failure is raised.
        """
        if self._fd is None:
            raise ValueError("lock file handle is closed")
        self._mutex.acquire()
        try:
            fcntl.flock(self._fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            self._mutex.release()
            return False
        except OSError:
            self._mutex.release()
            raise
        self._held = True
        return True

    def unlock(self) -> None:
        """Close the lock file, which releases the lock if it was held."""
        fd, self._fd = self._fd, None
        held, self._held = self._held, False
        try:
            if fd is not None:
                os.close(fd)
        finally:
            if held:
                self._mutex.release()

    def __enter__(self) -> XtablesLock:
        self.try_lock()
        return self

    def __exit__(self, *args: object) -> None:
        self.unlock()