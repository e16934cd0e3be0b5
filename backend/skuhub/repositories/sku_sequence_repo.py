from datetime import datetime, timezone

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from skuhub.models.sku_sequence import SkuSequence

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class SkuSequenceRepository:
    def __init__(self, db: Session):
        self.db = db

    def next_value(self, business_id: int, prefix: str) -> int:
        """
        Insert the (business, prefix) row with sequence 1, or bump the existing
        one, in a single statement and return the resulting value.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"SKU sequences need an upsert-capable database, got {dialect}")
        now = datetime.now(timezone.utc)
        stmt = (
            insert(SkuSequence)
            .values(
                business_id=business_id,
                prefix=prefix,
                current_sequence=1,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_update(
                index_elements=[SkuSequence.business_id, SkuSequence.prefix],
                set_={
                    "current_sequence": SkuSequence.current_sequence + 1,
                    "updated_at": now,
                },
            )
            .returning(SkuSequence.current_sequence)
        )
        return int(self.db.execute(stmt).scalar_one())

    def current_value(self, business_id: int, prefix: str) -> int:
        value = (
            self.db.query(SkuSequence.current_sequence)
            .filter(SkuSequence.business_id == business_id, SkuSequence.prefix == prefix)
            .scalar()
        )
        return int(value or 0)
