"""
Kirana configuration package.

Exposes the process-wide config object and the location of the bundled
vocabulary files under config/data/.
"""
from pathlib import Path

from .config import KiranaConfig, config

DATA_DIR = Path(__file__).resolve().parent / "data"

__all__ = ["config", "KiranaConfig", "DATA_DIR"]
