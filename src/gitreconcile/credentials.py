"""Credential provider for network git operations.

A :class:`Credential` is an opaque capability handed to every clone, ref
listing and push. It never appears on a git command line: HTTP credentials
become ``http.extraHeader`` entries injected through ``GIT_CONFIG_COUNT``
environment variables, and SSH material is written into the scratch
directory of the pass, which is removed with it.

Usage:
    ```python
    config = load_config()
    credential = build_credential(config.auth)
    with EphemeralRepository(url, credential) as repo:
        ...
    ```
"""

from __future__ import annotations

import base64
import os
import shlex
import stat
from abc import ABC, abstractmethod
from pathlib import Path

from gitreconcile.config import AuthConfig, SSHKeyConfig
from gitreconcile.utils.security import url_scheme

__all__ = [
    "AnonymousCredential",
    "BasicCredential",
    "Credential",
    "SSHKeyCredential",
    "TokenCredential",
    "build_credential",
    "git_config_environment",
]

#: Variable the askpass helper reads the key passphrase from
_PASSPHRASE_ENV_VAR = "GITRECONCILE_SSH_PASSPHRASE"

_ASKPASS_SCRIPT = f"""#!/bin/sh
printf '%s\\n' "${_PASSPHRASE_ENV_VAR}"
"""


def git_config_environment(entries: dict[str, str]) -> dict[str, str]:
    """Encode git configuration *entries* as ``GIT_CONFIG_*`` variables.

    Example:
        >>> git_config_environment({"core.autocrlf": "false"})
        {'GIT_CONFIG_COUNT': '1', 'GIT_CONFIG_KEY_0': 'core.autocrlf', \
'GIT_CONFIG_VALUE_0': 'false'}
    """
    env = {"GIT_CONFIG_COUNT": str(len(entries))}
    for index, (key, value) in enumerate(entries.items()):
        env[f"GIT_CONFIG_KEY_{index}"] = key
        env[f"GIT_CONFIG_VALUE_{index}"] = value
    return env


class Credential(ABC):
    """Authentication capability for one pass."""

    def git_config(self) -> dict[str, str]:
        """Git configuration entries this credential contributes."""
        return {}

    @abstractmethod
    def environment(self, scratch: Path) -> dict[str, str]:
        """Process environment for git commands of a pass.

        Args:
            scratch: Private directory of the pass; files written here are
                removed when the pass ends.
        """

    @abstractmethod
    def describe(self) -> str:
        """Short, secret-free description for logs."""


class AnonymousCredential(Credential):
    """No authentication."""

    def environment(self, scratch: Path) -> dict[str, str]:
        return {}

    def describe(self) -> str:
        return "anonymous"


class _HeaderCredential(Credential):
    def __init__(self, header: str) -> None:
        self._header = header

    def git_config(self) -> dict[str, str]:
        return {"http.extraHeader": self._header}

    def environment(self, scratch: Path) -> dict[str, str]:
        return {}


class TokenCredential(_HeaderCredential):
    """HTTP bearer token."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Authorization: Bearer {token}")

    def describe(self) -> str:
        return "token"


class BasicCredential(_HeaderCredential):
    """HTTP basic authentication."""

    def __init__(self, username: str, password: str) -> None:
        self.username = username
        encoded = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        super().__init__(f"Authorization: Basic {encoded}")

    def describe(self) -> str:
        return f"basic:{self.username}"


class SSHKeyCredential(Credential):
    """SSH public-key authentication.

    Args:
        private_key_path: Key file on disk, used in place.
        private_key_pem: Inline key, written into the scratch directory.
        passphrase: Passphrase of an encrypted key, answered via SSH_ASKPASS.
        known_hosts: known_hosts lines; enables strict host key checking
            against exactly these keys.
        insecure_ignore_host_key: Disable host key verification.
        username: Login used when the URL names none.
    """

    def __init__(
        self,
        *,
        private_key_path: Path | None = None,
        private_key_pem: str | None = None,
        passphrase: str | None = None,
        known_hosts: str | None = None,
        insecure_ignore_host_key: bool = False,
        username: str = "git",
    ) -> None:
        if (private_key_path is None) == (private_key_pem is None):
            raise ValueError(
                "Exactly one of private_key_path and private_key_pem is required"
            )
        self._key_path = private_key_path
        self._key_pem = private_key_pem
        self._passphrase = passphrase
        self._known_hosts = known_hosts
        self._insecure = insecure_ignore_host_key
        self.username = username

    def environment(self, scratch: Path) -> dict[str, str]:
        scratch.mkdir(parents=True, exist_ok=True)
        key_path = self._key_path
        if key_path is None:
            key_path = _write_private(scratch / "id_key", _pem_text(self._key_pem))

        command = [
            "ssh",
            "-i",
            str(key_path),
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            f"User={self.username}",
        ]
        if self._known_hosts:
            hosts_path = _write_private(
                scratch / "known_hosts", self._known_hosts.strip() + "\n"
            )
            command += [
                "-o",
                "StrictHostKeyChecking=yes",
                "-o",
                f"UserKnownHostsFile={hosts_path}",
            ]
        elif self._insecure:
            command += [
                "-o",
                "StrictHostKeyChecking=no",
                "-o",
                f"UserKnownHostsFile={os.devnull}",
            ]

        env: dict[str, str] = {}
        if self._passphrase:
            askpass = _write_private(scratch / "askpass.sh", _ASKPASS_SCRIPT)
            askpass.chmod(stat.S_IRWXU)
            env.update(
                SSH_ASKPASS=str(askpass),
                SSH_ASKPASS_REQUIRE="force",
                DISPLAY=os.environ.get("DISPLAY", ":0"),
            )
            env[_PASSPHRASE_ENV_VAR] = self._passphrase
        else:
            command += ["-o", "BatchMode=yes"]

        env["GIT_SSH_COMMAND"] = shlex.join(command)
        return env

    def describe(self) -> str:
        source = "inline" if self._key_path is None else str(self._key_path)
        return f"ssh:{self.username}:{source}"


def _pem_text(pem: str | None) -> str:
    text = (pem or "").strip()
    return text + "\n"


def _write_private(path: Path, content: str) -> Path:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return path


def _ssh_credential(ssh: SSHKeyConfig) -> SSHKeyCredential:
    return SSHKeyCredential(
        private_key_path=ssh.private_key_path,
        private_key_pem=(
            ssh.private_key_pem.get_secret_value() if ssh.private_key_pem else None
        ),
        passphrase=ssh.passphrase.get_secret_value() if ssh.passphrase else None,
        known_hosts=ssh.known_hosts,
        insecure_ignore_host_key=ssh.insecure_ignore_host_key,
        username=ssh.username,
    )


def build_credential(auth: AuthConfig, url: str | None = None) -> Credential:
    """Pick the credential for *url* from resolved configuration.

    ssh URLs use the SSH settings when present; everything else prefers a
    token, then username/password, then anonymous access.

    Args:
        auth: Authentication settings, environment overrides already applied.
        url: Repository URL the credential is for, if known.

    Returns:
        The credential to hand to the engine.
    """
    if auth.ssh is not None and (url is None or url_scheme(url) == "ssh"):
        if url is not None or (auth.token is None and auth.username is None):
            return _ssh_credential(auth.ssh)
    if auth.token is not None:
        return TokenCredential(auth.token.get_secret_value())
    if auth.username and auth.password is not None:
        return BasicCredential(auth.username, auth.password.get_secret_value())
    return AnonymousCredential()

