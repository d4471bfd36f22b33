"""Config Loader - Loads named request targets from YAML.

A config file maps target names to a host plus defaults (headers, timeout,
TLS settings). String values support ``${ENV_VAR}`` substitution so secrets
stay out of the file:

    targets:
      users_api:
        host: https://users.internal
        timeout: 5
        headers:
          Authorization: "Bearer ${USERS_API_TOKEN}"
"""

from __future__ import annotations

import os
import re
import ssl
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from httprequest.builder import Builder, Option, new_builder
from httprequest.executor import Transport
from httprequest.options import client, header, timeout


class ConfigError(Exception):
    """Raised when configuration loading fails."""


class TargetConfig(BaseModel):
    """Configuration for a single target."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(description="Scheme and host, e.g. https://api.example.com")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers added to every request (supports ${ENV_VAR} substitution)",
    )
    timeout: float | None = Field(default=None, ge=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify the server certificate")
    ca_bundle: str | None = Field(default=None, description="CA bundle path for verification")
    cert: str | None = Field(default=None, description="Client certificate path (mTLS)")
    key: str | None = Field(default=None, description="Client private key path (mTLS)")
    key_password: str | None = Field(default=None, description="Client private key password")
    ciphers: str | None = Field(default=None, description="OpenSSL cipher string")


class RuntimeConfig(BaseModel):
    """Top-level configuration file structure."""

    model_config = ConfigDict(extra="forbid")

    targets: dict[str, TargetConfig] = Field(description="Target name -> config mapping")


def load_runtime_config(config_path: Path) -> RuntimeConfig:
    """Load configuration from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    try:
        return RuntimeConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def get_target(config: RuntimeConfig, name: str) -> TargetConfig:
    """Look up a target by name."""
    try:
        return config.targets[name]
    except KeyError:
        known = ", ".join(sorted(config.targets)) or "(none)"
        raise ConfigError(f"Unknown target '{name}'. Known targets: {known}") from None


def build_client(target: TargetConfig) -> httpx.Client:
    """Create an httpx.Client with the target's timeout and TLS settings.

    The caller owns the client and must close it.
    """
    return httpx.Client(**_build_client_kwargs(target))


def _build_client_kwargs(target: TargetConfig) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    if target.timeout is not None:
        kwargs["timeout"] = target.timeout

    ssl_context = _build_ssl_context(target)
    if ssl_context is not None:
        kwargs["verify"] = ssl_context

    return kwargs


def _build_ssl_context(target: TargetConfig) -> ssl.SSLContext | None:
    """SSL context for the target's TLS settings, or None to keep httpx defaults."""
    if not (target.ca_bundle or target.cert or target.ciphers or not target.verify_ssl):
        return None

    if target.ca_bundle:
        try:
            ssl_context = ssl.create_default_context(cafile=target.ca_bundle)
        except OSError as e:
            raise ConfigError(f"Cannot load CA bundle '{target.ca_bundle}': {e}") from e
    else:
        ssl_context = httpx.create_ssl_context(verify=target.verify_ssl)

    if target.ciphers:
        try:
            ssl_context.set_ciphers(target.ciphers)
        except ssl.SSLError as e:
            raise ConfigError(f"Invalid cipher string '{target.ciphers}': {e}") from e

    # Client certificate (mTLS)
    if target.cert:
        try:
            ssl_context.load_cert_chain(
                target.cert, keyfile=target.key, password=target.key_password
            )
        except OSError as e:
            raise ConfigError(f"Cannot load client certificate '{target.cert}': {e}") from e

    return ssl_context


def target_options(target: TargetConfig) -> list[Option]:
    """Options that apply the target's headers and timeout to a builder."""
    options: list[Option] = [header(key, value) for key, value in target.headers.items()]
    if target.timeout is not None:
        options.append(timeout(target.timeout))
    return options


def new_target_builder(
    target: TargetConfig,
    *options: Option,
    transport: Transport | None = None,
) -> Builder:
    """Builder for *target*: host, headers and timeout from config, then *options*.

    When *transport* is given it is used to send; otherwise the builder keeps
    the shared default transport (see ``build_client`` for TLS settings).
    """
    defaults = target_options(target)
    if transport is not None:
        defaults.append(client(transport))
    return new_builder(target.host, *defaults, *options)


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return _ENV_VAR_PATTERN.sub(replacer, s)
