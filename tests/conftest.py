"""
Pytest configuration and fixtures for protosign tests.
"""

from __future__ import annotations

import logging
import os
from typing import Generator

import pytest

from protosign.breaking.loader import BreakingConfigLoader
from protosign.config import reset_config
from protosign.logger import ROOT_LOGGER


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Strip PROTOSIGN_* variables and reset cached settings for each test."""
    for key in list(os.environ):
        if key.startswith("PROTOSIGN_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()
    BreakingConfigLoader.clear_cache()

    yield

    reset_config()
    BreakingConfigLoader.clear_cache()
    # CLI runs install a stderr handler bound to the runner's stream.
    package_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ============================================================================
# Schema Fixtures
# ============================================================================


USER_V1 = """\
syntax = "proto3";

package acme.users.v1;

// A registered user.
message User {
  string name = 1;
  int32 age = 2;
}

enum Status {
  UNSPECIFIED = 0;
  ACTIVE = 1;
  INACTIVE = 2;
}

service UserService {
  rpc GetUser(User) returns (User);
}
"""


@pytest.fixture
def user_v1_text() -> str:
    return USER_V1


@pytest.fixture
def proto_dir(tmp_path):
    """Directory holding v1/v2 copies of the user schema."""
    (tmp_path / "v1").mkdir()
    (tmp_path / "v2").mkdir()
    return tmp_path
