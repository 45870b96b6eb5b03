"""ownersync — keep CODEOWNERS files in sync through signed GitHub commits."""

__version__ = "0.1.0"
