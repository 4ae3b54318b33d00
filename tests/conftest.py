"""
Pytest configuration for cmdfeed tests.

This module runs before any test imports, setting up the test environment.
Environment variables are cleared so Config defaults are deterministic
regardless of the developer's shell or .env file.
"""

import os

for _name in (
    "CMDFEED_DATABASE_PATH",
    "CMDFEED_DB_ECHO",
    "FEED_USER_AGENT",
    "FEED_TIMEOUT",
    "SEARCH_TIMEOUT",
    "SEARCH_COUNTRY",
):
    os.environ.pop(_name, None)
