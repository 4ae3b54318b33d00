"""CLI commands for feed subscriptions.

Provides commands for:
- Adding podcasts from feed URLs
- Listing and showing stored podcasts
- Refreshing feeds and reporting new entries
- Removing podcasts
- Searching podcast and feed directories
"""

import argparse
import logging
import sys

from ..config import Config
from ..errors import CmdfeedError
from ..podcast.models import PodcastOptions
from ..podcast.registry import PodcastRegistry
from ..rss.feed_parser import FeedFetcher
from ..search.feedly import search_feeds
from ..search.itunes import ItunesSearchClient
from ..store.factory import create_backend_from_config
from ..subscription.state import Options

logger = logging.getLogger(__name__)


def _open_registry(config: Config):
    backend = create_backend_from_config(config)
    fetcher = FeedFetcher(user_agent=config.FEED_USER_AGENT, timeout=config.FEED_TIMEOUT)
    return backend, PodcastRegistry(backend, fetcher=fetcher)


def add_podcast(args, config: Config):
    """
    Subscribe to the feed at args.url and store it under args.slug.

    Parameters:
        args: Parsed CLI arguments with `slug`, `url`, `download_dir`, `recent` and `keep_removed`.
        config (Config): Application configuration.
    """
    logger.info(f"Adding podcast {args.slug} from: {args.url}")
    backend, registry = _open_registry(config)

    try:
        pod = registry.new_podcast(
            args.slug,
            args.url,
            PodcastOptions(download_directory=args.download_dir, recent_entries=args.recent),
            Options(include_removed_entries=args.keep_removed),
        )

        print(f"\nAdded podcast: {pod.slug}")
        print(f"  Title: {pod.subscription.snapshot.feed.title}")
        print(f"  Subscription: {pod.subscription.id}")
        print(f"  Entries: {len(pod.subscription.entries)}")

    finally:
        backend.close()


def list_podcasts(args, config: Config):
    """Print a table of all stored podcasts."""
    backend, registry = _open_registry(config)

    try:
        podcasts = registry.all_podcasts()

        if not podcasts:
            print("No podcasts found")
            return

        print(f"\n{'Slug':<20}  {'Title':<40}  {'Entries':<8}  {'Last fetched'}")
        print("-" * 100)

        for pod in podcasts:
            snapshot = pod.subscription.snapshot
            print(
                f"{pod.slug[:20]:<20}  "
                f"{snapshot.feed.title[:40]:<40}  "
                f"{len(pod.subscription.entries):<8}  "
                f"{snapshot.fetch_time:%Y-%m-%d %H:%M}"
            )

    finally:
        backend.close()


def show_podcast(args, config: Config):
    """Print one podcast and its most recent entries."""
    backend, registry = _open_registry(config)

    try:
        pod = registry.podcast(args.slug)
        snapshot = pod.subscription.snapshot

        print(f"\n{pod.slug}: {snapshot.feed.title}")
        print(f"  URL: {snapshot.url}")
        print(f"  Subscription: {pod.subscription.id}")
        print(f"  Keep removed entries: {pod.subscription.options.include_removed_entries}")
        if pod.options.download_directory:
            print(f"  Download directory: {pod.options.download_directory}")
        print(f"  Downloaded: {len(pod.downloaded)}")

        entries = sorted(pod.subscription.entries, key=lambda e: e.published, reverse=True)
        if pod.options.recent_entries is not None:
            entries = entries[:pod.options.recent_entries]

        print(f"\nEntries ({len(entries)}):")
        for entry in entries:
            print(f"  {entry.published:%Y-%m-%d}  {entry.title[:70]}")

    finally:
        backend.close()


def refresh_podcasts(args, config: Config):
    """Refresh one podcast (args.slug) or all of them and print new entries."""
    backend, registry = _open_registry(config)

    try:
        if args.slug:
            slugs = [args.slug]
        else:
            slugs = [pod.slug for pod in registry.all_podcasts()]

        total = 0
        for slug in slugs:
            pod, fresh = registry.refresh_podcast(slug)
            total += len(fresh)
            print(f"{slug}: {len(fresh)} new entries")
            for entry in fresh:
                print(f"  + {entry.title[:70]}")

        print(f"\nRefresh complete: {total} new entries")

    finally:
        backend.close()


def remove_podcast(args, config: Config):
    """Delete the podcast stored under args.slug."""
    backend, registry = _open_registry(config)

    try:
        if registry.delete_podcast(args.slug):
            print(f"Removed podcast: {args.slug}")
        else:
            print(f"No podcast named {args.slug}")
            sys.exit(1)

    finally:
        backend.close()


def search(args, config: Config):
    """Search the iTunes podcast directory, or Feedly with --feeds."""
    if args.feeds:
        result = search_feeds(args.term, timeout=config.SEARCH_TIMEOUT)
        if not result.results:
            print("No feeds found")
            return
        for entry in result.results[:args.limit]:
            print(f"{entry.title[:50]:<50}  {entry.feed_url}")
        return

    client = ItunesSearchClient(timeout=config.SEARCH_TIMEOUT)
    podcasts = client.search_podcasts(args.term, limit=args.limit, country=config.SEARCH_COUNTRY)
    if not podcasts:
        print("No podcasts found")
        return
    for podcast in podcasts:
        print(f"{podcast.name[:40]:<40}  {podcast.artist_name[:25]:<25}  {podcast.feed_url}")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Feed subscription CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        help="Path to .env file",
        default=None,
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help="Set log level (DEBUG, INFO, WARNING, ERROR)",
        default="WARNING",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Subscribe to a feed under a slug",
    )
    add_parser.add_argument("slug", help="Short unique name for the podcast")
    add_parser.add_argument("url", help="RSS/Atom feed URL")
    add_parser.add_argument(
        "--download-dir",
        help="Directory for downloaded episodes",
    )
    add_parser.add_argument(
        "--recent",
        type=int,
        help="Number of recent entries to show",
    )
    add_parser.add_argument(
        "--keep-removed",
        action="store_true",
        help="Keep entries that disappear from the feed",
    )

    # list command
    subparsers.add_parser(
        "list",
        help="List stored podcasts",
    )

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show a podcast and its entries",
    )
    show_parser.add_argument("slug", help="Podcast slug")

    # refresh command
    refresh_parser = subparsers.add_parser(
        "refresh",
        help="Fetch feeds again and report new entries",
    )
    refresh_parser.add_argument("slug", nargs="?", help="Refresh only this podcast")

    # remove command
    remove_parser = subparsers.add_parser(
        "remove",
        help="Delete a podcast",
    )
    remove_parser.add_argument("slug", help="Podcast slug")

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search directories for feeds",
    )
    search_parser.add_argument("term", help="Search text")
    search_parser.add_argument(
        "--feeds",
        action="store_true",
        help="Search general feeds on Feedly instead of podcasts on iTunes",
    )
    search_parser.add_argument(
        "--limit",
        type=int,
        default=25,
        help="Maximum number of results",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Load configuration
    config = Config(env_file=args.env_file)

    # Route to appropriate command
    commands = {
        "add": add_podcast,
        "list": list_podcasts,
        "show": show_podcast,
        "refresh": refresh_podcasts,
        "remove": remove_podcast,
        "search": search,
    }

    command_func = commands.get(args.command)
    if command_func is None:
        parser.print_help()
        sys.exit(1)

    try:
        command_func(args, config)
    except CmdfeedError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
