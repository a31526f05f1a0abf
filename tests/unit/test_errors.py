from __future__ import annotations

from lib_agent_config.core import LayerLoadError
from lib_agent_config.domain.errors import (
    ConfigError,
    FlagError,
    HelpRequested,
    InvalidFormat,
    NotFound,
    ValidationError,
)


def test_error_hierarchy() -> None:
    assert issubclass(InvalidFormat, ConfigError)
    assert issubclass(FlagError, InvalidFormat)
    assert issubclass(ValidationError, ConfigError)
    assert issubclass(NotFound, ConfigError)
    assert issubclass(LayerLoadError, ConfigError)
    for exception in (InvalidFormat(""), FlagError(""), ValidationError(""), NotFound("")):
        assert isinstance(exception, ConfigError)


def test_help_requested_carries_usage() -> None:
    error = HelpRequested("Usage of agent:\n")
    assert isinstance(error, ConfigError)
    assert not isinstance(error, InvalidFormat)
    assert error.usage == "Usage of agent:\n"
    assert str(error) == "help requested"
