# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Allow running homer with ``python -m homer``."""

import sys

from homer.main import main

sys.exit(main())
