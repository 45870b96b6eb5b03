"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CODEOWNERS_PATH = ".github/CODEOWNERS"


@dataclass
class GitHubConfig:
    token: str = field(default="", repr=False)
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0


@dataclass
class IdentityConfig:
    username: str = ""
    email: str = ""  # must match the signing key's uid when signing


@dataclass
class SigningConfig:
    gpg_secret_key: str = field(default="", repr=False)
    gpg_passphrase: str = field(default="", repr=False)

    @property
    def enabled(self) -> bool:
        return bool(self.gpg_secret_key)


@dataclass
class CommitConfig:
    message_prefix: str = ""


@dataclass
class FileConfig:
    path: str = DEFAULT_CODEOWNERS_PATH
    desired_state: str = "owners.yaml"


@dataclass
class OwnersyncConfig:
    version: str = "1.0"
    github: GitHubConfig = field(default_factory=GitHubConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    file: FileConfig = field(default_factory=FileConfig)

    def commit_message(self, text: str) -> str:
        """Return *text* with the configured prefix applied."""
        return f"{self.commit.message_prefix}{text}"

    @property
    def signing_key(self) -> Optional[str]:
        return self.signing.gpg_secret_key or None
