"""Tests for the shared logging setup."""

import logging

import pytest

from frigo.shared.logging import QUIET_LOGGERS, setup_logging


@pytest.fixture
def restore_levels():
    names = [*QUIET_LOGGERS, "frigo.noisy"]
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def test_client_libraries_are_quietened(restore_levels):
    setup_logging("debug", service="poller", quiet=["frigo.noisy"])

    for name in (*QUIET_LOGGERS, "frigo.noisy"):
        assert logging.getLogger(name).level == logging.WARNING
