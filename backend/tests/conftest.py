"""Root conftest — shared test configuration."""

import os

# Keep tests off any real gateway/cache a developer's .env points at
os.environ.setdefault("GATEWAY_URL", "http://gateway.test")
os.environ.setdefault("CACHE_HOST", "cache.test")
os.environ.setdefault("LOG_FORMAT", "text")
