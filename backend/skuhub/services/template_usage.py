from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.orm import Session

from skuhub.db import SessionLocal
from skuhub.repositories.template_repo import TemplateRepository
from skuhub.utils import background
from skuhub.utils.logging import get_logger
from skuhub.utils.outbox import defer_until_commit

log = get_logger("skuhub.templates", "TEMPLATE-USAGE")


class TemplateUsageTracker:
    """
    Best-effort template usage counters and product <-> template linkage.

    Tracking always runs in its own short-lived session after the product it
    refers to is committed. A failure is logged and never reaches, or rolls
    back, the code that created the product. No retries.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def track(self, template_id: int, product_id: int) -> bool:
        now = datetime.now(timezone.utc)
        try:
            with self.session_factory() as s:
                with s.begin():
                    repo = TemplateRepository(s)
                    if not repo.record_usage(template_id, now):
                        log.warning("template=%s not found; usage not recorded", template_id)
                        return False
                    if not repo.link_product(product_id, template_id, now):
                        log.warning(
                            "product=%s not found; template=%s usage counted but not linked",
                            product_id, template_id,
                        )
            log.info("template=%s used by product=%s", template_id, product_id)
            return True
        except Exception:
            log.exception(
                "tracking template=%s for product=%s failed", template_id, product_id
            )
            return False

    def dispatch(self, template_id: int, product_id: int):
        """Fire-and-forget: for callers whose product is already committed."""
        background.submit(self.track, template_id, product_id)

    def track_after_commit(self, session: Session, template_id: int, product_id: int):
        """Fire-and-forget once `session` commits the transaction creating the product."""
        defer_until_commit(session, self.track, template_id, product_id)
