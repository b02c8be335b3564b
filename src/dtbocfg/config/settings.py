"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DTBO_CONFIG_*`` prefix, plus ``CONFIG_DTBO_PATH``
  3. TOML file    — ``dtbo-config.toml`` (see :mod:`dtbocfg.config.discovery`)
  4. Code defaults

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource`.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsError

from dtbocfg.config.discovery import ROOT_ENV_VAR, find_config, resolve_overlay_root


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``dtbo-config.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DtboSettings(BaseSettings):
    """Settings for one ``dtbo-config`` invocation, frozen after construction.

    Attributes:
        config_dtbo_path: Explicit overlay root (``CONFIG_DTBO_PATH``).
        config_path: The TOML file that was loaded, if any.
        dtc: Device-tree compiler executable.
        dtc_flags: Extra compiler flags placed before ``-I dts -O dtb``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DTBO_CONFIG_",
        "env_ignore_empty": True,
        "extra": "ignore",
    }

    config_dtbo_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices(ROOT_ENV_VAR, "config_dtbo_path"),
    )
    config_path: Path | None = None

    # --- Compiler ---
    dtc: str = "dtc"
    dtc_flags: tuple[str, ...] = ("-@",)

    # --- CLI flags ---
    verbose: bool = False
    debug: bool = False
    dry_run: bool = False
    json_output: bool = False
    log_json: bool = False

    @property
    def overlay_root(self) -> Path:
        """The overlay configuration root (may not exist yet)."""
        return resolve_overlay_root(self.config_dtbo_path)

    @property
    def overlay_root_source(self) -> str | None:
        """Where an explicit overlay root came from, or None for the defaults."""
        if self.config_dtbo_path is None:
            return None
        if os.environ.get(ROOT_ENV_VAR):
            return ROOT_ENV_VAR
        return f"config_dtbo_path in {self.config_path}"

    @property
    def compiler_argv(self) -> tuple[str, ...]:
        """Compiler invocation prefix, without the input path."""
        return (self.dtc, *self.dtc_flags, "-I", "dts", "-O", "dtb")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(cls, *, config_path: str | None = None, **cli_flags: Any) -> DtboSettings:
        """Construct settings from a CLI invocation.

        Locates the TOML file (explicit *config_path* or discovery) and
        merges CLI flags as highest-priority overrides. Flags left unset
        (``None`` or ``False``) are dropped so env vars and TOML apply.

        Raises:
            click.ClickException: If the TOML file or an env var holds an
                invalid value.
        """
        overrides = {key: value for key, value in cli_flags.items() if value}
        toml_path = find_config(config_path)
        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        except (ValidationError, SettingsError) as exc:
            raise click.ClickException(f"Invalid configuration: {exc}") from exc
        finally:
            _tls.toml_path = None
