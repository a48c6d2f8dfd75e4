import os

# Settings are read at import time; the service refuses to start without a key.
os.environ.setdefault("ARV_APP_AUTH_KEY", "test-auth-key")
os.environ.setdefault("ARV_DEBUG", "false")
