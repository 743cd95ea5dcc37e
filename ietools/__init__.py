"""
IE Translation Tools
====================

Helpers for translators of Infinity Engine games (BG:EE, SoD and friends):
- Dialog structure extraction from decompiled D and BAF files
- Linearized string groups for reading dialogs top to bottom
- HTML cross reference of dialog trees
- String IDs of ITM, CRE and 2DA resources
- Translation progress graphics

License: WTFPL
"""

from .version import VERSION

__version__ = VERSION
__author__ = "IE Translation Tools contributors"
