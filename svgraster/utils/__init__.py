"""
Shared utilities for svgraster.

Common functionality used across contexts and scripts:
- Logging setup with provenance
- Timestamps for log directories
"""

from svgraster.utils.timestamp import now

__all__ = ["now"]
