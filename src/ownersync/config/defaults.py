"""Starter .ownersync.toml and owners.yaml templates."""

DEFAULT_TOML = """\
# ownersync configuration
version = "1.0"

[github]
# token = ""                # prefer the GITHUB_TOKEN env var
api_url = "https://api.github.com"
timeout = 30.0

[identity]
# username = "ci-bot"       # or GITHUB_USERNAME
# email = "ci-bot@example.com"  # or GITHUB_EMAIL; must match the GPG key uid

[signing]
# gpg_secret_key / gpg_passphrase are best supplied as
# GPG_SECRET_KEY / GPG_PASSPHRASE

[commit]
# message_prefix = "[ownersync] "

[file]
path = ".github/CODEOWNERS"
desired_state = "owners.yaml"
"""

DEFAULT_OWNERS_YAML = """\
# Desired CODEOWNERS content, one entry per repository branch.
- repository: my-org/my-repo
  branch: main
  rules:
    - pattern: "*"
      owners: ["my-org/maintainers"]
    - pattern: "docs/"
      owners: ["docs-team@example.com"]
"""
