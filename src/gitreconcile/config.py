from __future__ import annotations

import os
import re
from collections.abc import Mapping
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal, Self

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitreconcile.constants import (
    DEFAULT_ALLOWED_SCHEMES,
    DEFAULT_COMMITTER_EMAIL,
    DEFAULT_COMMITTER_NAME,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_REMOTE_NAME,
    DEFAULT_STATE_FILE,
    ENV_PREFIX,
    PROJECT_CONFIG_FILE,
    TOKEN_ENV_VAR,
)
from gitreconcile.exceptions import ConfigError
from gitreconcile.logging import get_logger

__all__ = [
    "AuthConfig",
    "CommitterConfig",
    "NetworkConfig",
    "ReconcileConfig",
    "SSHKeyConfig",
    "get_user_config_path",
    "load_config",
]

logger = get_logger(__name__)

#: Project config file chosen by ``load_config`` for the current call
_project_config_path: ContextVar[Path | None] = ContextVar(
    "_project_config_path", default=None
)

#: Fields whose offending value must not be echoed back
_SECRET_FIELD_HINTS = re.compile(r"token|password|passphrase|pem|auth")


class SSHKeyConfig(BaseModel):
    """SSH public-key authentication.

    Exactly one of ``private_key_path`` and ``private_key_pem`` must be set.

    Attributes:
        username: Remote user for URLs that do not carry one.
        private_key_path: Private key file on disk.
        private_key_pem: Inline PEM private key.
        passphrase: Passphrase of an encrypted key.
        known_hosts: known_hosts lines pinning the remote host key.
        insecure_ignore_host_key: Skip host key verification entirely.
    """

    username: str = "git"
    private_key_path: Path | None = None
    private_key_pem: SecretStr | None = None
    passphrase: SecretStr | None = None
    known_hosts: str | None = None
    insecure_ignore_host_key: bool = False

    @model_validator(mode="after")
    def check_single_key_source(self) -> Self:
        if (self.private_key_path is None) == (self.private_key_pem is None):
            raise ValueError(
                "Exactly one of private_key_path and private_key_pem is required"
            )
        if self.known_hosts and self.insecure_ignore_host_key:
            raise ValueError(
                "known_hosts and insecure_ignore_host_key are mutually exclusive"
            )
        return self


class AuthConfig(BaseModel):
    """Credentials for network operations.

    A token wins over username/password; SSH settings apply to ssh URLs and
    are used when no HTTP credential is configured.
    """

    token: SecretStr | None = None
    username: str | None = None
    password: SecretStr | None = None
    ssh: SSHKeyConfig | None = None

    @model_validator(mode="after")
    def check_basic_pair(self) -> Self:
        if self.password is not None and not self.username:
            raise ValueError("auth.password requires auth.username")
        return self


class NetworkConfig(BaseModel):
    """Settings for clone, ref listing and push.

    Attributes:
        timeout_seconds: Bound on any single network git command.
        pass_attempts: Whole-pass attempts when a push is rejected
            (1 disables retries).
        allowed_schemes: URL schemes accepted for repository URLs.
        remote_name: Name of the remote in every ephemeral clone.
    """

    timeout_seconds: float = Field(default=DEFAULT_NETWORK_TIMEOUT, gt=0, le=3600)
    pass_attempts: int = Field(default=1, ge=1, le=10)
    allowed_schemes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_SCHEMES)
    )
    remote_name: str = DEFAULT_REMOTE_NAME


class CommitterConfig(BaseModel):
    """Identity recorded as author and committer of engine commits."""

    name: str = DEFAULT_COMMITTER_NAME
    email: str = DEFAULT_COMMITTER_EMAIL


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that loads a YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {yaml_file}: {e}") from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    f"Config file {yaml_file} must contain a mapping",
                    value=type(loaded).__name__,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._config_data


class ReconcileConfig(BaseSettings):
    """Root configuration passed explicitly into every engine call."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )

    auth: AuthConfig = Field(default_factory=AuthConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    committer: CommitterConfig = Field(default_factory=CommitterConfig)
    state_file: Path = Path(DEFAULT_STATE_FILE)
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order settings sources.

        Priority (highest to lowest):
        1. Environment variables (GITRECONCILE_*)
        2. Keyword arguments
        3. Project YAML config (./gitreconcile.yaml or --config)
        4. User YAML config (~/.config/gitreconcile/config.yaml)
        """
        project_config_path = (
            _project_config_path.get() or Path.cwd() / PROJECT_CONFIG_FILE
        )
        return (
            env_settings,
            init_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Return ``~/.config/gitreconcile/config.yaml``."""
    return Path.home() / ".config" / "gitreconcile" / "config.yaml"


def _apply_token_override(
    config: ReconcileConfig, environ: Mapping[str, str]
) -> ReconcileConfig:
    token = environ.get(TOKEN_ENV_VAR, "")
    if not token:
        return config
    logger.debug("token_from_environment", variable=TOKEN_ENV_VAR)
    auth = config.auth.model_copy(update={"token": SecretStr(token)})
    return config.model_copy(update={"auth": auth})


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ReconcileConfig:
    """Load configuration: defaults -> user -> project -> env.

    Environment overrides are resolved here, once; the returned object is
    then passed to the engine, which never reads the environment itself.

    Args:
        config_path: Project config file. Defaults to ./gitreconcile.yaml.
        environ: Environment used for the token override. Defaults to
            ``os.environ``.

    Returns:
        The merged configuration.

    Raises:
        ConfigError: If a config file is unreadable or a value is invalid.
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError(
            f"Config file not found: {config_path}",
            field="config",
            value=str(config_path),
        )

    token = _project_config_path.set(config_path)
    try:
        config = ReconcileConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        value = None if _SECRET_FIELD_HINTS.search(field) else first_error.get("input")
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=value,
        ) from e
    finally:
        _project_config_path.reset(token)

    return _apply_token_override(config, os.environ if environ is None else environ)
