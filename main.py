#!/usr/bin/env python3
"""
Main entry point for the search index.
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from searchindex.concurrency.work_queue import WorkQueue
from searchindex.crawler.fetcher import HtmlFetcher
from searchindex.crawler.parser import MalformedInputError
from searchindex.crawler.web_crawler import WebCrawler
from searchindex.engine.builder import InvertedIndexBuilder, ConcurrentIndexBuilder
from searchindex.engine.query_handler import QueryHandler, ConcurrentQueryHandler
from searchindex.storage.inverted_index import InvertedIndex
from searchindex.storage.concurrent_index import ConcurrentInvertedIndex
from searchindex.utils.config import Config, ConfigurationError, load_config
from searchindex.utils.logger import setup_logging, log_system_info
from searchindex.utils.monitoring import initialize_monitoring


DEFAULT_INDEX_PATH = 'index.json'
DEFAULT_COUNTS_PATH = 'counts.json'
DEFAULT_RESULTS_PATH = 'results.json'


class SearchApp:
    """Builds or crawls an index, answers queries and writes the requested outputs."""

    def __init__(self, config: Config):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.queue: Optional[WorkQueue] = None

    def run(self, args: argparse.Namespace) -> int:
        engine = self.config.engine
        threads = args.threads if args.threads is not None else engine.threads
        max_links = args.max if args.max is not None else engine.max_links
        exact = args.exact or engine.exact
        concurrent = args.threads is not None or args.url is not None

        crawler = None
        try:
            if concurrent:
                self.queue = WorkQueue(threads)
                index = ConcurrentInvertedIndex()
                builder = ConcurrentIndexBuilder(index, self.queue)
                handler = ConcurrentQueryHandler(index, self.queue)

                if args.url:
                    fetcher = HtmlFetcher(
                        user_agent=self.config.fetcher.user_agent,
                        request_timeout=self.config.fetcher.request_timeout
                    )
                    crawler = WebCrawler(index, self.queue, max_links, fetcher, engine.redirects)
            else:
                index = InvertedIndex()
                builder = InvertedIndexBuilder(index)
                handler = QueryHandler(index)

            if args.path:
                try:
                    builder.create_index(args.path)
                except OSError as e:
                    self.logger.error(f"Unable to build the inverted index from {args.path}: {e}")

            if crawler:
                try:
                    crawler.crawl(args.url)
                except MalformedInputError as e:
                    self.logger.error(f"Malformed URL: {e}")

            if args.queries:
                try:
                    handler.perform_search(exact, args.queries)
                except OSError as e:
                    self.logger.error(f"Unable to process queries from {args.queries}: {e}")

            self._write(builder.write_results, args.index, "index")
            self._write(builder.write_word_counts, args.counts, "counts")
            self._write(handler.output_results, args.results, "results")
        finally:
            if self.queue:
                self.queue.shutdown()

        return 0

    def _write(self, write, path: Optional[str], what: str):
        if path is None:
            return
        try:
            write(Path(path))
            self.logger.info(f"Wrote {what} to {path}")
        except OSError as e:
            self.logger.error(f"Couldn't write {what} to {path}: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inverted index builder, web crawler and search engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --path texts/ --index                    # Build and write index.json
  python main.py --path texts/ --threads 8 --counts       # Build with 8 worker threads
  python main.py --url https://example.com/ --max 50      # Crawl up to 50 pages
  python main.py --path texts/ --queries q.txt --results  # Search and write results.json
        """
    )

    parser.add_argument('--config', help='Path to a YAML configuration file')
    parser.add_argument('--path', help='Text file or directory of text files to index')
    parser.add_argument('--url', help='Seed URL to crawl')
    parser.add_argument('--max', type=int, help='Maximum number of URLs to crawl')
    parser.add_argument('--threads', type=int, help='Number of worker threads')
    parser.add_argument('--queries', help='File with one query per line')
    parser.add_argument('--exact', action='store_true', help='Exact instead of partial search')
    parser.add_argument('--index', nargs='?', const=DEFAULT_INDEX_PATH,
                        help=f'Write the index as JSON (default: {DEFAULT_INDEX_PATH})')
    parser.add_argument('--counts', nargs='?', const=DEFAULT_COUNTS_PATH,
                        help=f'Write word counts as JSON (default: {DEFAULT_COUNTS_PATH})')
    parser.add_argument('--results', nargs='?', const=DEFAULT_RESULTS_PATH,
                        help=f'Write query results as JSON (default: {DEFAULT_RESULTS_PATH})')
    parser.add_argument('--json-logs', action='store_true', help='Emit logs as JSON')
    parser.add_argument('--version', action='version', version='Search Index 1.0.0')

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    start = time.time()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}")
        return 1

    setup_logging(vars(config.logging), enable_json=args.json_logs or config.logging.json)
    log_system_info()

    monitor = initialize_monitoring(config.monitoring.metrics_enabled, config.monitoring.prometheus_port)
    monitor.metrics.start_prometheus_server()

    try:
        status = SearchApp(config).run(args)
    except ConfigurationError as e:
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        status = 1
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        status = 1

    logging.getLogger(__name__).info(f"Metrics: {monitor.get_summary()['metrics']}")
    print(f"Elapsed: {time.time() - start:f} seconds")
    return status


if __name__ == '__main__':
    sys.exit(main())
