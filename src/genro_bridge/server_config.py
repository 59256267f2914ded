# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Bridge server configuration."""

from __future__ import annotations

from typing import Any

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

__all__ = ["BridgeConfig", "DEFAULTS"]

DEFAULTS = {
    "host": "127.0.0.1",
    "port": 8000,
    "log_level": "INFO",
    "exit_code": 1,
}


def _bridge_opts_spec(
    handler: str,
    host: str,
    port: int,
    log_level: str,
    exit_code: int,
) -> None:
    """Reference function for SmartOptions type extraction (no defaults)."""


class BridgeConfig:
    """Bridge server options from defaults, environment, argv and caller."""

    __slots__ = ("_opts",)

    def __init__(
        self,
        handler: str | None = None,
        host: str | None = None,
        port: int | None = None,
        log_level: str | None = None,
        exit_code: int | None = None,
        argv: list[str] | None = None,
    ) -> None:
        self._opts = self._build_config(
            dict(
                handler=handler,
                host=host,
                port=port,
                log_level=log_level,
                exit_code=exit_code,
            ),
            argv or [],
        )

    def _build_config(self, caller: dict[str, Any], argv: list[str]) -> SmartOptions:
        """Build options from multiple sources.

        Config precedence (later overrides earlier):
        1. Built-in DEFAULTS
        2. Environment variables: GENRO_BRIDGE_*
        3. Command line arguments
        4. Explicit constructor parameters
        """
        env_argv_opts = SmartOptions(_bridge_opts_spec, env="GENRO_BRIDGE", argv=argv)
        caller_opts = SmartOptions(caller, ignore_none=True)
        return SmartOptions(DEFAULTS) + env_argv_opts + caller_opts

    @property
    def handler(self) -> str | None:
        """Handler import path, ``"module:attr"``."""
        result: str | None = self._opts["handler"]
        return result

    @property
    def host(self) -> str:
        return str(self._opts["host"])

    @property
    def port(self) -> int:
        return int(self._opts["port"])

    @property
    def log_level(self) -> str:
        return str(self._opts["log_level"]).upper()

    @property
    def exit_code(self) -> int:
        """Process exit code used by the fatal policy."""
        return int(self._opts["exit_code"])

    def __getitem__(self, name: str) -> Any:
        """Proxy bracket access to underlying opts."""
        return self._opts[name]


if __name__ == "__main__":
    config = BridgeConfig()
    print(f"Server: {config.host}:{config.port}")
    print(f"Handler: {config.handler}")
