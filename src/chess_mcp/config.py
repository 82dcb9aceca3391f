"""Runtime settings, read from the environment (and a `.env` file)."""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Self

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "CHESS_MCP_"


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 3000
    endpoint_path: str = "/mcp"
    games_dir: Path = field(default_factory=lambda: Path("games"))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> Self:
        """Build settings from CHESS_MCP_* environment variables.

        Raises:
            ValueError: If CHESS_MCP_PORT is not a port number.
        """
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))

        defaults = cls()
        port = os.getenv(f"{ENV_PREFIX}PORT")
        return cls(
            host=os.getenv(f"{ENV_PREFIX}HOST", defaults.host),
            port=_parse_port(port) if port is not None else defaults.port,
            endpoint_path=os.getenv(f"{ENV_PREFIX}ENDPOINT", defaults.endpoint_path),
            games_dir=Path(os.getenv(f"{ENV_PREFIX}GAMES_DIR", str(defaults.games_dir))),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).upper(),
        )

    def with_overrides(self, **overrides: Any) -> Self:
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.endpoint_path}"


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ValueError(f"Invalid port: {value!r}") from None
    if not 0 < port < 65536:
        raise ValueError(f"Invalid port: {value!r}")
    return port
