"""Custom exceptions for the detection context with config file references."""

from pathlib import Path
from typing import Optional, Union


class RulesConfigError(ValueError):
    """
    Exception raised when a rules table (taxonomies, tech catalog, navigation)
    is malformed.

    Classification itself never raises; this is only raised while loading
    configuration, before any page is scored.

    Attributes:
        message: Error description
        config_path: File the rules were loaded from (if any)
        key: Dotted path of the offending entry (e.g., "content_type.labels.tutorial")
    """

    def __init__(
        self,
        message: str,
        config_path: Optional[Union[str, Path]] = None,
        key: Optional[str] = None,
    ):
        self.message = message
        self.config_path = config_path
        self.key = key

        parts = [message]
        if key:
            parts.append(f"Key: {key}")
        if config_path:
            parts.append(f"Config: {config_path}")

        super().__init__("\n".join(parts))
