"""Central version declaration for skill-swap-matcher.

Update this file when cutting a new release tag. Keep semantic versioning.
The CLI --version flag and packaging metadata import from here.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
