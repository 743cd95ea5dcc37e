# -*- coding: utf-8 -*-
"""
Encoding helpers
================

Decompiled game sources come from several tools and are not always UTF-8
(NearInfinity exports of older games are often cp1252), so every text read
falls back to chardet when UTF-8 does not decode.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Set, Tuple, Union

import chardet

logger = logging.getLogger(__name__)


def detect_encoding(raw_bytes: bytes, default: str = "utf-8") -> str:
    """Guess the encoding of raw bytes, falling back to `default`."""
    if not raw_bytes:
        return default
    detected = chardet.detect(raw_bytes)
    return detected.get('encoding') or default


def read_text_safely(file_path: Union[str, Path], preferred: Tuple[str, ...] = ("utf-8-sig", "utf-8"),
                     default: str = "utf-8") -> str:
    """
    Read a text file with tolerant fallbacks:
    - try preferred encodings first
    - then chardet detection with errors='replace'
    """
    raw_bytes = Path(file_path).read_bytes()

    for encoding in preferred:
        try:
            return raw_bytes.decode(encoding)
        except UnicodeDecodeError:
            continue

    encoding = detect_encoding(raw_bytes, default)
    try:
        return raw_bytes.decode(encoding, errors='replace')
    except LookupError:
        # chardet may name a codec Python does not ship
        logger.warning(f"Unknown encoding {encoding} for {file_path}, using {default}")
        return raw_bytes.decode(default, errors='replace')


def list_files(folder: Union[str, Path], extensions: Iterable[str]) -> List[Path]:
    """Return regular files of `folder` with one of `extensions`, sorted by name.

    Extensions are compared case-insensitively and given without the dot.
    """
    wanted: Set[str] = {ext.lower().lstrip('.') for ext in extensions}
    folder = Path(folder)
    result = [
        path for path in folder.iterdir()
        if path.is_file() and path.suffix.lower().lstrip('.') in wanted
    ]
    return sorted(result, key=lambda p: p.name.lower())
