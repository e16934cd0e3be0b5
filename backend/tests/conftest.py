import os
import tempfile

# must run before skuhub.config is imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="skuhub-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")
