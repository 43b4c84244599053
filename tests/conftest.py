"""Shared pytest fixtures."""

from typing import List

import pytest

from iotmodem.config.config_models import LogLevel
from iotmodem.core.command_interface import CommandInterface
from iotmodem.logging.communication_logger import CommunicationLogger
from tests.fakes import FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def comm_logger():
    """Logger that only keeps entries in memory."""
    logger = CommunicationLogger(log_level=LogLevel.DEBUG, enable_console=False)
    yield logger
    logger.close()


@pytest.fixture
def make_interface(transport, comm_logger):
    """Factory for CommandInterface instances on the fake transport; closed on teardown."""
    created: List[CommandInterface] = []

    def factory(start: bool = True, **kwargs) -> CommandInterface:
        kwargs.setdefault("line_timeout", 1.0)
        kwargs.setdefault("logger", comm_logger)
        cmd = CommandInterface(transport.port, transport=transport, **kwargs)
        created.append(cmd)
        if start:
            cmd.start()
        return cmd

    yield factory

    for cmd in created:
        cmd.close()
