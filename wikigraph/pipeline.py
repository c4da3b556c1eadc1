"""
The whole import, across language editions.

For each edition, in the order given:
1. Load the namespace table, the disambiguation pages, the infobox
   templates and the geotags (four concurrent tasks)
2. Extract the links of every page into the intermediate stream
3. Import the stream into the graph store, on the single import thread

Step 3 of an edition overlaps steps 1-2 of the next one, but two imports
never run at the same time because they share the store. Once every edition
is in the store, cross-language links are resolved in batches of editions
and imported. Completed extraction stages are recorded in the checkpoint
ledger so that a failed run can be resumed.
"""
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .checkpoint import CheckpointLedger, Stage
from .config import ImportConfig
from .editions import (
    DISAMBIGUATION_ROOTS_RESOURCE,
    INFOBOX_ROOTS_RESOURCE,
    Edition,
    EditionFiles,
    load_root_categories,
)
from .extractors.link_extraction import extract_links_file
from .graph.builder import BuildStats, GraphBuilder
from .graph.crosslinks import CrossLinkResolver, import_cross_links
from .graph.protocols import GraphStore
from .graph.schema import DEFAULT_INDEXES
from .progress import elapsed_since
from .wikipedia.dump_parser import read_namespaces
from .wikipedia.lookups import load_template_names, load_title_set
from .wikipedia.markup import WikiMarkupAnalyzer
from .wikipedia.namespaces import Namespaces
from .wikipedia.pages import Geotags
from .wikipedia.sql_dumps import read_geotags

logger = logging.getLogger(__name__)


@dataclass
class EditionInputs:
    """Read-only lookup tables of one edition, ready before link extraction."""
    namespaces: Namespaces
    disambiguation_pages: frozenset
    infobox_templates: frozenset
    geotags: Dict[str, Geotags]


@dataclass
class ImportSummary:
    """Outcome of a run."""
    languages: List[str] = field(default_factory=list)
    builds: Dict[str, BuildStats] = field(default_factory=dict)
    cross_links: int = 0
    cross_link_misses: int = 0

    @property
    def nodes(self) -> int:
        return sum(stats.nodes for stats in self.builds.values())

    @property
    def relationships(self) -> int:
        return sum(stats.total_relationships for stats in self.builds.values()) + self.cross_links


class ImportPipeline:
    """
    Runs an import of several editions into one graph store.

    Example:
        pipeline = ImportPipeline(config, store, CheckpointLedger(config.checkpoint_path))
        summary = pipeline.run(load_editions(["en", "fr"]))
    """

    def __init__(self, config: ImportConfig, store: GraphStore, ledger: CheckpointLedger):
        self.config = config
        self.store = store
        self.ledger = ledger
        self.disambiguation_roots = load_root_categories(DISAMBIGUATION_ROOTS_RESOURCE)
        self.infobox_roots = load_root_categories(INFOBOX_ROOTS_RESOURCE)

    def files(self, edition: Edition) -> EditionFiles:
        return EditionFiles(self.config.edition_dir(edition.code))

    # Per-edition preparation

    def load_namespaces(self, edition: Edition) -> Namespaces:
        files = self.files(edition)
        if files.namespaces.exists():
            logger.info(f"[{edition.code}] Using the namespaces from a previous run")
            return Namespaces.load(files.namespaces)
        namespaces = read_namespaces(self._pages_dump(files))
        namespaces.save(files.namespaces)
        return namespaces

    def load_disambiguation_pages(self, edition: Edition) -> frozenset:
        files = self.files(edition)
        if not files.disambiguation_pages.exists():
            self._log_missing_list(edition, files.disambiguation_pages.name, self.disambiguation_roots)
        titles = load_title_set(files.disambiguation_pages)
        if files.disambiguation_pages.exists():
            self.ledger.mark_done(Stage.DISAMBIG_EXTRACTED, edition.code)
        return titles

    def load_infobox_templates(self, edition: Edition) -> frozenset:
        files = self.files(edition)
        if not files.infobox_templates.exists():
            self._log_missing_list(edition, files.infobox_templates.name, self.infobox_roots)
        names = load_template_names(files.infobox_templates)
        if files.infobox_templates.exists():
            self.ledger.mark_done(Stage.INFOBOX_EXTRACTED, edition.code)
        return names

    @staticmethod
    def _log_missing_list(edition: Edition, name: str, roots: Mapping[str, str]) -> None:
        root = roots.get(edition.code)
        if root is None:
            logger.info(f"[{edition.code}] No known root category to build {name} from")
        else:
            logger.info(f"[{edition.code}] {name} is built from the pages under {root}")

    def load_geotags(self, edition: Edition) -> Dict[str, Geotags]:
        dump = self.files(edition).geotags_dump
        if dump is None:
            logger.warning(f"[{edition.code}] No geo_tags dump, articles will have no coordinates")
            return {}
        return read_geotags(dump, show_progress=self.config.show_progress)

    def prepare_edition(self, edition: Edition) -> EditionInputs:
        """Run the four independent loading tasks of an edition concurrently."""
        with ThreadPoolExecutor(max_workers=4, thread_name_prefix=f"prepare-{edition.code}") as pool:
            namespaces = pool.submit(self.load_namespaces, edition)
            disambiguation_pages = pool.submit(self.load_disambiguation_pages, edition)
            infobox_templates = pool.submit(self.load_infobox_templates, edition)
            geotags = pool.submit(self.load_geotags, edition)
            return EditionInputs(
                namespaces=namespaces.result(),
                disambiguation_pages=disambiguation_pages.result(),
                infobox_templates=infobox_templates.result(),
                geotags=geotags.result(),
            )

    def extract_links(self, edition: Edition, inputs: EditionInputs) -> None:
        files = self.files(edition)
        if self.ledger.is_done(Stage.LINKS_EXTRACTED, edition.code) and files.links.exists():
            logger.info(f"[{edition.code}] Using the links extracted in a previous run")
            return
        analyzer = WikiMarkupAnalyzer(
            inputs.namespaces, inputs.infobox_templates, inputs.disambiguation_pages
        )
        extract_links_file(
            self._pages_dump(files),
            files.links,
            analyzer,
            inputs.namespaces,
            show_progress=self.config.show_progress,
        )
        self.ledger.mark_done(Stage.LINKS_EXTRACTED, edition.code)

    def import_edition(self, edition: Edition, geotags: Mapping[str, Geotags]) -> BuildStats:
        builder = GraphBuilder(
            self.store,
            edition.code,
            geotags=geotags,
            show_progress=self.config.show_progress,
            batch_size=self.config.import_batch_size,
        )
        return builder.import_file(self.files(edition).links)

    # Cross-language links

    def extract_cross_links(
        self, edition: Edition, namespaces_by_language: Mapping[str, Namespaces]
    ) -> int:
        """Resolve one edition's langlinks into its cross-link file. Returns the misses."""
        files = self.files(edition)
        if self.ledger.is_done(Stage.CROSSLINKS_EXTRACTED, edition.code) and files.cross_links.exists():
            logger.info(f"[{edition.code}] Using the cross-links from a previous run")
            return 0
        dump = files.langlinks_dump
        misses = 0
        if dump is None:
            logger.warning(f"[{edition.code}] No langlinks dump, no cross-links from this edition")
            files.cross_links.write_text('', encoding='utf-8')
        else:
            resolver = CrossLinkResolver(
                self.store, edition.code, namespaces_by_language,
                show_progress=self.config.show_progress,
            )
            resolver.extract(dump, files.cross_links)
            misses = resolver.misses
        self.ledger.mark_done(Stage.CROSSLINKS_EXTRACTED, edition.code)
        return misses

    def add_cross_links(
        self, editions: Sequence[Edition], namespaces_by_language: Mapping[str, Namespaces]
    ) -> ImportSummary:
        summary = ImportSummary()
        batch_size = self.config.crosslink_batch_size
        for first in range(0, len(editions), batch_size):
            batch = editions[first:first + batch_size]
            with ThreadPoolExecutor(max_workers=len(batch), thread_name_prefix="crosslinks") as pool:
                futures = [
                    pool.submit(self.extract_cross_links, edition, namespaces_by_language)
                    for edition in batch
                ]
                summary.cross_link_misses += sum(future.result() for future in futures)

        for edition in editions:
            summary.cross_links += import_cross_links(
                self.store,
                self.files(edition).cross_links,
                show_progress=self.config.show_progress,
                batch_size=self.config.import_batch_size,
            )
        return summary

    # The run

    def run(self, editions: Sequence[Edition]) -> ImportSummary:
        start = time.monotonic()
        self.ledger.load()
        self.store.create_indexes(DEFAULT_INDEXES)

        summary = ImportSummary(languages=[edition.code for edition in editions])
        namespaces_by_language: Dict[str, Namespaces] = {}
        try:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="graph-import") as importer:
                pending: Optional[Future] = None
                for edition in editions:
                    edition_start = time.monotonic()
                    logger.info(f"[{edition.code}] Preparing the {edition.language} edition")
                    inputs = self.prepare_edition(edition)
                    namespaces_by_language[edition.code] = inputs.namespaces
                    self.extract_links(edition, inputs)
                    logger.info(f"[{edition.code}] Extraction done in {elapsed_since(edition_start)}")

                    if pending is not None:
                        stats = pending.result()
                        summary.builds[stats.language] = stats
                    pending = importer.submit(self.import_edition, edition, inputs.geotags)
                if pending is not None:
                    stats = pending.result()
                    summary.builds[stats.language] = stats

            cross_links = self.add_cross_links(editions, namespaces_by_language)
            summary.cross_links = cross_links.cross_links
            summary.cross_link_misses = cross_links.cross_link_misses
        finally:
            # a failed run still releases the store; working files are kept for a resume
            self.store.shutdown()

        if not self.config.keep_working_files:
            self.cleanup(editions)
        logger.info(
            f"Imported {len(editions)} editions: {summary.nodes} nodes, "
            f"{summary.relationships} relationships ({summary.cross_links} cross-links) "
            f"in {elapsed_since(start)}"
        )
        return summary

    def cleanup(self, editions: Sequence[Edition]) -> None:
        """Delete the working files of every edition and the checkpoint ledger."""
        for edition in editions:
            for path in self.files(edition).working_files():
                if path.exists():
                    path.unlink()
        self.ledger.delete()
        logger.info("Working files and checkpoint deleted")

    @staticmethod
    def _pages_dump(files: EditionFiles):
        dump = files.pages_dump
        if dump is None:
            raise FileNotFoundError(
                f"No pages-articles dump in {files.directory} "
                f"(expected {EditionFiles.PAGES_PATTERN})"
            )
        return dump
