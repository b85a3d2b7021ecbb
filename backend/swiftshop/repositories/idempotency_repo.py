import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from swiftshop.models.idempotency import IdempotencyRecord

log = logging.getLogger(__name__)


class IdempotencyRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[IdempotencyRecord]:
        return (
            self.db.query(IdempotencyRecord)
            .filter(IdempotencyRecord.key == key)
            .populate_existing()
            .first()
        )

    def record(self, key: str, user_id: str, receipt_id: int) -> IdempotencyRecord:
        """Add the key inside the caller's transaction; a duplicate fails at flush."""
        rec = IdempotencyRecord(key=key, user_id=user_id, receipt_id=receipt_id)
        self.db.add(rec)
        self.db.flush()
        return rec

    def purge_older_than(self, cutoff: datetime) -> int:
        deleted = (
            self.db.query(IdempotencyRecord)
            .filter(IdempotencyRecord.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        log.debug("purge_older_than(%s): deleted=%d", cutoff.isoformat(), deleted)
        return deleted
