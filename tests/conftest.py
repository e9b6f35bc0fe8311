"""Pytest configuration for CounterProductive test suite."""

import os

# Ensure test environment variables are set before any imports
os.environ.setdefault("COUNTERPRODUCTIVE_LOG_LEVEL", "warning")
os.environ.setdefault("COUNTERPRODUCTIVE_TIMEZONE", "America/Vancouver")
os.environ.pop("COUNTERPRODUCTIVE_GIST_ID", None)
os.environ.pop("COUNTERPRODUCTIVE_GITHUB_TOKEN", None)
