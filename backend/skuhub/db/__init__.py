import importlib
import os

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from skuhub.config import settings
from skuhub.utils.logging import get_logger

log = get_logger("skuhub.db", "DB")

DATABASE_URL = settings.DATABASE_URL

_connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    _connect_args = {
        "check_same_thread": False,
        "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS,
    }

engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=_connect_args)
# instances stay readable after commit without reopening a (write-locking) transaction
SessionLocal = sessionmaker(
    autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
)
Base = declarative_base()


if engine.dialect.name == "sqlite":
    # pysqlite defers BEGIN until the first DML statement, which breaks SAVEPOINT
    # nesting. Take over transaction control and grab the write lock up front so
    # concurrent writers queue on the busy timeout instead of deadlocking.

    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


MODEL_MODULES = [
    "skuhub.models.business",
    "skuhub.models.product",
    "skuhub.models.barcode",
    "skuhub.models.template",
    "skuhub.models.sku_sequence",
    "skuhub.models.price_change",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    Behavior:
      - If reset is True or RESET_DB env var is set to 1/true/yes, drop & recreate tables.
      - Otherwise, leave existing tables in place and create missing ones.

    All model modules are imported first so metadata is populated.
    """
    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset or env_reset:
        log.info("Resetting database schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.debug("Database initialized: %s", ", ".join(sorted(Base.metadata.tables)))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
