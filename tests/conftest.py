"""Root conftest — keeps MONOLINK_* settings from the real env out of tests.

load_settings() reads MONOLINK_PATH, MONOLINK_WORKSPACE_PATH and
MONOLINK_LOG_LEVEL (and .env files may set them), so every test starts with
them unset and any value a test loads is dropped afterwards.
"""

import os

import pytest

_SETTINGS_ENV_VARS = ("MONOLINK_PATH", "MONOLINK_WORKSPACE_PATH", "MONOLINK_LOG_LEVEL")

for _var in _SETTINGS_ENV_VARS:
    os.environ.pop(_var, None)


@pytest.fixture(autouse=True)
def _isolate_settings_env():
    for var in _SETTINGS_ENV_VARS:
        os.environ.pop(var, None)
    yield
    for var in _SETTINGS_ENV_VARS:
        os.environ.pop(var, None)
