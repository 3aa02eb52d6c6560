"""
Configuration classes for xmi2conll.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .settings import read_config

logger = logging.getLogger(__name__)


@dataclass
class ConversionConfig:
    """Configuration for converting one document."""
    document_name: Optional[str] = None  # Default: output file name without extension
    part_number: int = 0
    placeholder: str = "_"  # Coreference column of tokens without markers
    filler_columns: int = 7  # Empty columns between word and coreference column
    context_chars: int = 30  # Characters of context on each side in mismatch messages
    write_fallback_text: bool = True  # Replace the output with the document text on alignment failure

    @classmethod
    def from_settings(cls, **overrides) -> "ConversionConfig":
        """Build a configuration from the settings file, with explicit overrides on top."""
        config = cls()
        stored = read_config()
        if "context_chars" in stored:
            try:
                config.context_chars = int(stored["context_chars"])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid context_chars setting: %r", stored["context_chars"])
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        return config
