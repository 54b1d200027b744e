"""Default configuration values.

This module defines the built-in default configuration values that are used
when no other configuration sources provide values.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "warning",
        "format": "text",
        "file": "",
    },
    "longevity": {
        "head": "HEAD",
        "tail": "",
        "authors": [],
        "rename_threshold": 60,
    },
}
