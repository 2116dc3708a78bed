import os
import tempfile

# Settings are read at import time; keep the app from touching Postgres on startup
# and write local photos somewhere disposable.
os.environ.setdefault("INIT_SCHEMA_ON_STARTUP", "false")
os.environ.setdefault("PHOTO_DIR", tempfile.mkdtemp(prefix="tailorshop-photos-"))
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-tailorshop-suite-0001")
