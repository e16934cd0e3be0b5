from fastapi import APIRouter
from sqlalchemy import text

from skuhub.db import engine
from skuhub.utils.background import scheduler

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False

    return {
        "status": "ok" if db_ok else "degraded",
        "db": db_ok,
        "scheduler": scheduler.running,
    }
