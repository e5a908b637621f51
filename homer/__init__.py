# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Homer - release branch and tag automation for git repositories."""

__version__ = "1.0.0"

from homer.errors import HomerError  # noqa: E402
from homer.version import ForkType, Version  # noqa: E402

__all__ = ["ForkType", "HomerError", "Version", "__version__"]
