"""
First pass of an import: XML dump to intermediate link stream.
"""
import logging
import time
from pathlib import Path

from ..compression import PathLike
from ..progress import ProgressCounter, elapsed_since
from ..wikipedia.dump_parser import StreamingPageParser
from ..wikipedia.markup import WikiMarkupAnalyzer
from ..wikipedia.namespaces import Namespaces
from .intermediate import IntermediateWriter

logger = logging.getLogger(__name__)


def extract_links_file(
    dump_path: PathLike,
    output_path: PathLike,
    analyzer: WikiMarkupAnalyzer,
    namespaces: Namespaces,
    show_progress: bool = True,
) -> int:
    """
    Analyze every article and category of a dump and write the intermediate stream.

    Args:
        dump_path: pages-articles XML dump (.bz2, .gz or plain)
        output_path: Intermediate file to create
        analyzer: Markup analyzer configured for the dump's edition
        namespaces: Namespace table of the edition
        show_progress: Show a tqdm page counter

    Returns:
        Number of pages written
    """
    start = time.monotonic()
    parser = StreamingPageParser(namespaces)
    logger.info(f"Extracting links from {Path(dump_path).name}")

    with IntermediateWriter(output_path) as writer, \
            ProgressCounter("Extracting links", unit="pages", show_progress=show_progress) as counter:
        for page in parser.iter_pages(dump_path):
            writer.write(analyzer.analyze_page(page))
            counter.increment()

    logger.info(
        f"Extracted links of {writer.count} pages ({parser.skipped} skipped) "
        f"in {elapsed_since(start)}"
    )
    return writer.count
