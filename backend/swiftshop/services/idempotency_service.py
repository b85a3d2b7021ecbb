import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from swiftshop.config import settings
from swiftshop.repositories.idempotency_repo import IdempotencyRepository
from swiftshop.utils.transactions import smart_transaction

log = logging.getLogger(__name__)


class IdempotencyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = IdempotencyRepository(db)

    def purge_expired(
        self, ttl_seconds: Optional[int] = None, now: Optional[datetime] = None
    ) -> int:
        """Delete checkout keys older than the TTL; returns how many were removed."""
        ttl_seconds = settings.IDEMPOTENCY_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(seconds=ttl_seconds)
        with smart_transaction(self.db):
            deleted = self.repo.purge_older_than(cutoff)
        self.db.commit()
        if deleted:
            log.info("Purged %d idempotency keys older than %s", deleted, cutoff.isoformat())
        return deleted
