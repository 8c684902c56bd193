"""Top-level package for skill-swap-matcher (ssm).

Version identifier is defined in :mod:`ssm.version` to keep a single source
of truth that can be imported without pulling heavier submodules.
"""

from .version import __version__  # re-export

__all__ = ["__version__"]
