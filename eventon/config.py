"""Dispatcher configuration.

Settings live in the ``[tool.eventon]`` table of a project's
``pyproject.toml``::

    [tool.eventon]
    name = "shop"
    enable_lock = true
    max_workers = 4
    local_plugins = ["shop.listeners"]
    start_event = "shop.main"

Every key is optional.
"""

import tomllib
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from eventon.exceptions import ConfigError
from eventon.utils import check_name

log = logger.bind(source=__name__)

CONFIG_TABLE = "eventon"


class DispatcherConfig(BaseModel):
    """Validated ``[tool.eventon]`` settings.

    Attributes:
        name: Dispatcher (registry) name, used in logs.
        enable_lock: Serialize publishes with a dispatcher-wide lock.
        max_workers: Thread pool size for async publishes (None lets
            ``ThreadPoolExecutor`` pick).
        thread_name_prefix: Prefix of worker thread names.
        local_plugins: Dotted module paths imported as plugins.
        start_event: Event published by ``evrun`` after plugins load.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = "default"
    enable_lock: bool = False
    max_workers: int | None = Field(default=None, ge=1)
    thread_name_prefix: str = "eventon"
    local_plugins: list[str] = Field(default_factory=list)
    start_event: str = "app.main"

    @field_validator("start_event")
    @classmethod
    def _valid_event_name(cls, value: str) -> str:
        return check_name(value)


def parse_config(table: dict[str, Any]) -> DispatcherConfig:
    """Validate a raw ``[tool.eventon]`` table.

    Raises:
        ConfigError: If the table has unknown keys or bad values.
    """
    try:
        return DispatcherConfig.model_validate(table)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_config(pyproject_path: Path) -> DispatcherConfig:
    """Read ``[tool.eventon]`` from a ``pyproject.toml`` file.

    A missing table yields the defaults.

    Args:
        pyproject_path: Path to the ``pyproject.toml`` file.

    Raises:
        ConfigError: If the table fails validation.
    """
    with open(pyproject_path, "rb") as fh:
        data = tomllib.load(fh)

    table = data.get("tool", {}).get(CONFIG_TABLE, {})
    if not table:
        log.debug(
            "No [tool.{}] table in {}, using defaults", CONFIG_TABLE, pyproject_path
        )
    return parse_config(table)
