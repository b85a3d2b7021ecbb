import hashlib
import os
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator, Optional

from filelock import FileLock, Timeout

from swiftshop.config import settings
from swiftshop.errors import TransientStoreError


def _lock_path(sku: str) -> str:
    os.makedirs(settings.LOCK_DIR, exist_ok=True)
    # skus may hold any character; the digest keeps file names safe and distinct
    digest = hashlib.sha256(sku.encode("utf-8")).hexdigest()[:32]
    return os.path.join(settings.LOCK_DIR, f"item_{digest}.lock")


@contextmanager
def item_locks(skus: Iterable[str], timeout: Optional[float] = None) -> Iterator[list]:
    """
    Hold one file lock per sku for the duration of the block.

    Locks are taken in sorted order so two checkouts touching overlapping
    item sets cannot deadlock.
    """
    timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
    ordered = sorted(set(skus))
    with ExitStack() as stack:
        for sku in ordered:
            lock = FileLock(_lock_path(sku))
            try:
                stack.enter_context(lock.acquire(timeout=timeout))
            except Timeout as e:
                raise TransientStoreError(
                    f"Could not acquire lock for {sku}; try again", cause=e
                ) from e
        yield ordered
