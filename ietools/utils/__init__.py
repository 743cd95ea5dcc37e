"""
Utils module for IE Translation Tools
=====================================
"""

from .config import ConfigManager, DialogSettings, OutputSettings, AppSettings
from .encoding import read_text_safely, list_files

__all__ = [
    'ConfigManager', 'DialogSettings', 'OutputSettings', 'AppSettings',
    'read_text_safely', 'list_files'
]
