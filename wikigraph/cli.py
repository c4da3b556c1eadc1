#!/usr/bin/env python
"""
Command line entry point: import Wikipedia editions into a graph.

Usage:
    wikigraph en,fr --root /data/wikipedia
    wikigraph --config import.json
    python -m wikigraph.cli fr --store neo4j --keep-working-files
"""
import argparse
import logging
import sys
from pathlib import Path


def parse_languages(value: str):
    codes = [code.strip() for code in value.split(',') if code.strip()]
    if not codes:
        raise argparse.ArgumentTypeError("expected a comma-separated list of language codes")
    return codes


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="wikigraph",
        description="Import Wikipedia dumps into a graph of articles, categories and links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "languages",
        nargs="?",
        type=parse_languages,
        help="Comma-separated language codes (default: every packaged edition)"
    )
    parser.add_argument(
        "--root",
        type=Path,
        help="Directory with one sub-directory of dumps per language (default: current directory)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON import configuration; command line options override it"
    )
    parser.add_argument(
        "--store",
        choices=["memory", "neo4j"],
        help="Graph store receiving the graph"
    )
    parser.add_argument(
        "--keep-working-files",
        action="store_true",
        help="Keep intermediate files and the checkpoint after a successful run"
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and suppress progress bars"
    )

    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(levelname)s: %(message)s'
    )

    try:
        from wikigraph.checkpoint import CheckpointLedger
        from wikigraph.config import ImportConfig
        from wikigraph.editions import load_editions
        from wikigraph.pipeline import ImportPipeline

        if args.config is not None:
            config = ImportConfig.load(args.config)
        else:
            config = ImportConfig(root_dir=args.root or Path.cwd())
        if args.root is not None:
            config.root_dir = args.root
        if args.store is not None:
            config.store = args.store
        if args.keep_working_files:
            config.keep_working_files = True
        if args.quiet:
            config.show_progress = False
        config.__post_init__()

        if not config.root_dir.exists():
            logging.error(f"Root directory does not exist: {config.root_dir}")
            sys.exit(1)

        editions = load_editions(args.languages)

        if config.store == "neo4j":
            from wikigraph.graph.neo4j_store import Neo4jGraphStore
            store = Neo4jGraphStore(
                config.neo4j_uri, config.neo4j_user, config.neo4j_password, config.neo4j_database
            )
        else:
            from wikigraph.graph.memory_store import InMemoryGraphStore
            store = InMemoryGraphStore(config.graph_path, show_progress=config.show_progress)

        logging.info(f"Importing {', '.join(e.code for e in editions)} from {config.root_dir}")
        pipeline = ImportPipeline(config, store, CheckpointLedger(config.checkpoint_path))
        summary = pipeline.run(editions)
        logging.info(
            f"Built graph with {summary.nodes} nodes and {summary.relationships} relationships"
        )

    except Exception as e:
        logging.error(f"Import failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
