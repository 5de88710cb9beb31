"""dotty - profile-based dotfile manager

Philosophy:
- One active profile at a time
- Each profile is backed by its own git branch
- Whole-document config writes (config.toml)
- Fail fast on unreadable config, never overwrite user data

dotty keeps a small TOML document describing your profiles and lets you
create, switch, update and delete them through guided prompts.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
