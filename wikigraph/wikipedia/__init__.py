"""
Reading Wikipedia dumps: namespaces, pages, markup and SQL tables.
"""
from .namespaces import Namespace, Namespaces, normalize_title
from .pages import Geotags, LinkRecord, PageRecord, RawPage
from .dump_parser import StreamingPageParser, read_namespaces
from .markup import WikiMarkupAnalyzer

__all__ = [
    'Namespace',
    'Namespaces',
    'normalize_title',
    'Geotags',
    'LinkRecord',
    'PageRecord',
    'RawPage',
    'StreamingPageParser',
    'read_namespaces',
    'WikiMarkupAnalyzer',
]
