"""
Link extraction pass and the intermediate stream it produces.
"""

from .intermediate import IntermediateWriter, Tags, read_intermediate
from .link_extraction import extract_links_file

__all__ = [
    "IntermediateWriter",
    "Tags",
    "read_intermediate",
    "extract_links_file",
]
