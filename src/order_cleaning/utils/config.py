# ========================
# src/order_cleaning/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the cleaning pipeline with environment support.
"""

import json
import os
from typing import Dict, Any, Optional


class Config:
    """
    Configuration class for the cleaning pipeline.
    Supports environment variables and default values.
    """

    VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # File format
        self.DELIMITER = os.getenv('CLEAN_DELIMITER', ',')
        self.SKIP_MALFORMED_ROWS = os.getenv('CLEAN_SKIP_MALFORMED', 'false').lower() == 'true'

        # Cleaning policy
        self.DEDUPE_KEY = os.getenv('CLEAN_DEDUPE_KEY', 'order_id')
        self.UNKNOWN_PRODUCT_NAME = os.getenv('CLEAN_UNKNOWN_PRODUCT_NAME', 'Unknown')

        # Reporting
        self.TOP_N = int(os.getenv('CLEAN_TOP_N', '5'))
        self.REPORT_DIR = os.getenv('CLEAN_REPORT_DIR') or None

        # Sample data generation
        self.SAMPLE_ROWS = int(os.getenv('SAMPLE_ROWS', '1000'))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')

        # Override with provided config
        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['delimiter'] = isinstance(self.DELIMITER, str) and len(self.DELIMITER) == 1
        validations['top_n'] = isinstance(self.TOP_N, int) and self.TOP_N >= 0
        validations['sample_rows'] = self.SAMPLE_ROWS > 0
        validations['dedupe_key'] = bool(self.DEDUPE_KEY)
        validations['log_level'] = str(self.LOG_LEVEL).upper() in self.VALID_LOG_LEVELS

        return validations

    def invalid_settings(self) -> list:
        """Names of settings that failed validation."""
        return [name for name, ok in self.validate_config().items() if not ok]

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if attr.isupper() and not attr.startswith('VALID_')
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        with open(file_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(file_path, 'r') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration Settings:"]
        config_dict = self.to_dict()
        for key, value in sorted(config_dict.items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
