"""
Precomputed per-edition title lists.

The disambiguation pages and infobox templates of an edition are collected
beforehand by crawling category trees, and stored one title per line.
"""
import logging
from pathlib import Path
from typing import FrozenSet

from .namespaces import normalize_title

logger = logging.getLogger(__name__)


def _read_lines(path: Path):
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                yield line


def load_title_set(path: Path) -> FrozenSet[str]:
    """Load a list of page titles (e.g. disambiguation pages). A missing file is an empty list."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"Title list not found: {path}, continuing without it")
        return frozenset()
    titles = frozenset(_read_lines(path))
    logger.info(f"Loaded {len(titles)} titles from {path.name}")
    return titles


def load_template_names(path: Path) -> FrozenSet[str]:
    """
    Load infobox template names.

    Entries may carry the template namespace ("Template:Infobox person" or
    "Modèle:Infobox Pays"); only the name after the first colon is kept, with
    its first letter upper-cased.
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Template list not found: {path}, no infobox will be detected")
        return frozenset()
    names = set()
    for line in _read_lines(path):
        name = line.partition(':')[2] if ':' in line else line
        name = name.strip()
        if name:
            names.add(normalize_title(name))
    logger.info(f"Loaded {len(names)} infobox templates from {path.name}")
    return frozenset(names)
