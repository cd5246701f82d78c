"""Shared fixtures."""

from unittest import mock

import pytest


@pytest.fixture(autouse=True)
def no_keychain():
    """Keep tests away from the real OS keychain."""
    from cliscore import token_store

    with mock.patch.object(token_store, "_AVAILABLE", False):
        yield
