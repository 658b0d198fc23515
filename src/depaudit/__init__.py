"""depaudit: Compact, auditable dependency graphs for compiled artifacts."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
