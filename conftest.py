"""Global pytest configuration."""

import os

# Keep tests off the real geocoding service before any settings are loaded
os.environ.setdefault("GEOCODING_BASE_URL", "https://geocode.test/places")
os.environ.setdefault("GEOCODING_ACCESS_TOKEN", "test-token")
