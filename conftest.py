"""Global pytest configuration."""

import os

# Keep tests on in-memory storage and offline providers unless explicitly configured
os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("ROUTES_API_KEY", "")
os.environ.setdefault("AI_SERVICE_URL", "http://itinerary.test")
