"""
Kirana Configuration

Centralized configuration for the voice command parser and its HTTP API.
All settings can be overridden via environment variables.
"""
import os
from typing import Optional


class KiranaConfig:
    """
    Central configuration for the kirana pipeline.

    All settings have sensible defaults and can be overridden via environment variables.

    Example:
        >>> from kirana.config import config
        >>> print(config.FUZZY_THRESHOLD)
        0.6

        # Per-instance override (tests, embedded use):
        >>> custom = KiranaConfig()
        >>> custom.FUZZY_THRESHOLD = 0.7
    """

    # ========================================================================
    # Catalog
    # ========================================================================

    CATALOG_PATH: Optional[str] = os.getenv("CATALOG_PATH")
    """Optional catalog YAML to load instead of the bundled store/catalog.yaml"""

    STRICT_CATALOG: bool = os.getenv("STRICT_CATALOG", "true").lower() == "true"
    """Reject catalogs in which one alias belongs to two products"""

    # ========================================================================
    # Product Matching
    # ========================================================================

    FUZZY_THRESHOLD: float = float(os.getenv("FUZZY_THRESHOLD", "0.6"))
    """Dice score a fuzzy product match must strictly exceed (0-1)"""

    EXACT_MATCH_CONFIDENCE: float = float(os.getenv("EXACT_MATCH_CONFIDENCE", "0.95"))
    """Confidence reported when an alias is contained in the text"""

    # ========================================================================
    # Intent Classification
    # ========================================================================

    INTENT_ACCEPT_THRESHOLD: float = float(os.getenv("INTENT_ACCEPT_THRESHOLD", "0.6"))
    """Scored result at or above this is accepted without the legacy table"""

    LEGACY_BASE_CONFIDENCE: float = float(os.getenv("LEGACY_BASE_CONFIDENCE", "0.7"))
    """Flat confidence of a legacy table hit"""

    MAX_CONFIDENCE: float = float(os.getenv("MAX_CONFIDENCE", "0.95"))
    """Cap applied to scored intent confidence"""

    ENABLE_PRODUCT_BOOST: bool = os.getenv(
        "ENABLE_PRODUCT_BOOST", "true").lower() == "true"
    """Treat a recognised product as evidence for billing.add"""

    PRODUCT_BOOST_FLOOR: float = float(os.getenv("PRODUCT_BOOST_FLOOR", "0.8"))
    """Minimum confidence after the product-presence boost"""

    # ========================================================================
    # Logging Settings
    # ========================================================================

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""

    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")
    """Log format: 'json' (structured) or 'pretty' (readable)"""

    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")
    """Optional: Write logs to file (e.g., '/var/log/kirana/api.log')"""

    ENABLE_REQUEST_LOGGING: bool = os.getenv(
        "ENABLE_REQUEST_LOGGING", "true").lower() == "true"
    """Log all HTTP requests/responses with timing"""

    # ========================================================================
    # API Settings
    # ========================================================================

    API_PORT: int = int(os.getenv("PORT", "9002"))
    """Port for Flask API server"""

    API_HOST: str = os.getenv("HOST", "0.0.0.0")
    """Host for Flask API server"""

    API_DEBUG: bool = os.getenv("API_DEBUG", "false").lower() == "true"
    """Enable Flask debug mode (DO NOT use in production)"""

    # ========================================================================
    # Helper Methods
    # ========================================================================

    @classmethod
    def from_env(cls):
        """
        Create config from environment variables.

        Returns:
            New KiranaConfig instance with current environment values
        """
        return cls()

    def summary(self) -> str:
        """
        Get configuration summary as formatted string.

        Returns:
            Multi-line string with all config values
        """
        lines = [
            "=" * 60,
            "Kirana Configuration",
            "=" * 60,
            "",
            "Catalog:",
            f"  Path:               {self.CATALOG_PATH or 'bundled'}",
            f"  Strict Aliases:     {'✅ Enabled' if self.STRICT_CATALOG else '❌ Disabled'}",
            "",
            "Matching:",
            f"  Fuzzy Threshold:    {self.FUZZY_THRESHOLD}",
            f"  Exact Confidence:   {self.EXACT_MATCH_CONFIDENCE}",
            "",
            "Intent:",
            f"  Accept Threshold:   {self.INTENT_ACCEPT_THRESHOLD}",
            f"  Legacy Confidence:  {self.LEGACY_BASE_CONFIDENCE}",
            f"  Product Boost:      {'✅ Enabled' if self.ENABLE_PRODUCT_BOOST else '❌ Disabled'}"
            f" (floor {self.PRODUCT_BOOST_FLOOR})",
            "",
            "API:",
            f"  Host:               {self.API_HOST}",
            f"  Port:               {self.API_PORT}",
            "",
            "Logging:",
            f"  Level:              {self.LOG_LEVEL}",
            f"  Format:             {self.LOG_FORMAT}",
            f"  File:               {self.LOG_FILE or 'None'}",
            f"  Request Logging:    {'✅ Enabled' if self.ENABLE_REQUEST_LOGGING else '❌ Disabled'}",
            "",
            "=" * 60,
        ]

        return "\n".join(lines)

    def __repr__(self):
        """String representation."""
        return (f"<KiranaConfig fuzzy={self.FUZZY_THRESHOLD} "
                f"accept={self.INTENT_ACCEPT_THRESHOLD} boost={self.ENABLE_PRODUCT_BOOST}>")


# Global config instance
config = KiranaConfig()
