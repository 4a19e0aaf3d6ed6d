from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from gitreconcile.config import (
    AuthConfig,
    NetworkConfig,
    ReconcileConfig,
    SSHKeyConfig,
    load_config,
)
from gitreconcile.constants import DEFAULT_ALLOWED_SCHEMES, DEFAULT_NETWORK_TIMEOUT
from gitreconcile.exceptions import ConfigError, ErrorKind


def test_load_defaults_when_no_config(clean_env: None, temp_dir: Path) -> None:
    """Test that defaults are used when no config file exists."""
    os.chdir(temp_dir)

    config = load_config(environ={})
    assert isinstance(config, ReconcileConfig)
    assert config.network.timeout_seconds == DEFAULT_NETWORK_TIMEOUT
    assert config.network.pass_attempts == 1
    assert tuple(config.network.allowed_schemes) == DEFAULT_ALLOWED_SCHEMES
    assert config.auth.token is None
    assert config.verbosity == "warning"


def test_load_project_config(clean_env: None, temp_dir: Path) -> None:
    """Test loading configuration from gitreconcile.yaml."""
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text(
        """
network:
  timeout_seconds: 30
  allowed_schemes: [https, file]
committer:
  name: Release Bot
  email: bot@example.com
verbosity: info
"""
    )

    config = load_config(environ={})
    assert config.network.timeout_seconds == 30
    assert config.network.allowed_schemes == ["https", "file"]
    assert config.committer.name == "Release Bot"
    assert config.verbosity == "info"


def test_explicit_config_path(clean_env: None, temp_dir: Path) -> None:
    path = temp_dir / "custom.yaml"
    path.write_text("network:\n  pass_attempts: 3\n")

    config = load_config(path, environ={})
    assert config.network.pass_attempts == 3


def test_missing_explicit_config_path_raises(clean_env: None, temp_dir: Path) -> None:
    with pytest.raises(ConfigError) as exc_info:
        load_config(temp_dir / "absent.yaml")
    assert exc_info.value.field == "config"
    assert exc_info.value.kind is ErrorKind.CONFIGURATION


def test_user_config_is_lowest_priority(clean_env: None, temp_dir: Path) -> None:
    os.chdir(temp_dir)
    user_config = temp_dir / "user-config" / "config.yaml"
    user_config.parent.mkdir(parents=True)
    user_config.write_text("network:\n  remote_name: upstream\nverbosity: debug\n")
    (temp_dir / "gitreconcile.yaml").write_text("verbosity: error\n")

    config = load_config(environ={})
    assert config.verbosity == "error"
    assert config.network.remote_name == "upstream"


def test_env_var_overrides(clean_env: None, temp_dir: Path) -> None:
    """Test that GITRECONCILE_* environment variables override config files."""
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text("network:\n  timeout_seconds: 30\n")
    os.environ["GITRECONCILE_NETWORK__TIMEOUT_SECONDS"] = "45"
    os.environ["GITRECONCILE_COMMITTER__NAME"] = "env-bot"

    config = load_config(environ={})
    assert config.network.timeout_seconds == 45
    assert config.committer.name == "env-bot"


def test_github_token_overrides_configured_token(
    clean_env: None, temp_dir: Path
) -> None:
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text("auth:\n  token: from-file\n")

    config = load_config(environ={"GITHUB_TOKEN": "from-env"})
    assert config.auth.token is not None
    assert config.auth.token.get_secret_value() == "from-env"

    config = load_config(environ={"GITHUB_TOKEN": ""})
    assert config.auth.token is not None
    assert config.auth.token.get_secret_value() == "from-file"


def test_invalid_config_raises_config_error(clean_env: None, temp_dir: Path) -> None:
    """Test that invalid configuration raises ConfigError."""
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text(
        "network:\n  pass_attempts: 15  # max is 10\n"
    )

    with pytest.raises(ConfigError) as exc_info:
        load_config(environ={})

    assert exc_info.value.field == "network.pass_attempts"
    assert exc_info.value.value == 15


def test_invalid_secret_is_not_echoed(clean_env: None, temp_dir: Path) -> None:
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text(
        "auth:\n  password: hunter2hunter2\n"
    )

    with pytest.raises(ConfigError) as exc_info:
        load_config(environ={})

    assert exc_info.value.value is None
    assert "hunter2" not in str(exc_info.value)


def test_invalid_yaml_raises_config_error(clean_env: None, temp_dir: Path) -> None:
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text("network: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(environ={})


def test_non_mapping_yaml_raises_config_error(clean_env: None, temp_dir: Path) -> None:
    os.chdir(temp_dir)
    (temp_dir / "gitreconcile.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(environ={})


class TestSSHKeyConfig:
    def test_requires_exactly_one_key_source(self) -> None:
        with pytest.raises(ValidationError):
            SSHKeyConfig()
        with pytest.raises(ValidationError):
            SSHKeyConfig(private_key_path=Path("/k"), private_key_pem="PEM")

    def test_pinning_and_insecure_are_exclusive(self) -> None:
        with pytest.raises(ValidationError):
            SSHKeyConfig(
                private_key_path=Path("/k"),
                known_hosts="github.com ssh-ed25519 AAAA",
                insecure_ignore_host_key=True,
            )

    def test_valid_inline_key(self) -> None:
        ssh = SSHKeyConfig(private_key_pem="PEM", passphrase="secret")
        assert ssh.username == "git"
        assert ssh.private_key_pem is not None
        assert "PEM" not in repr(ssh)


def test_password_requires_username() -> None:
    with pytest.raises(ValidationError):
        AuthConfig(password="x")


def test_network_bounds() -> None:
    with pytest.raises(ValidationError):
        NetworkConfig(timeout_seconds=0)
    with pytest.raises(ValidationError):
        NetworkConfig(pass_attempts=0)
