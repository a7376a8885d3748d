#!/usr/bin/env python3
"""
Scheduled synchronization script for the offline sync service.

This script performs one incremental change list synchronization:
- Syncs topics and news resources concurrently from their stored cursors
- Retries the whole run with exponential backoff if any entity type fails
- Rebuilds the search index after a fully successful run
- Logs synchronization statistics

Designed to be run on a schedule (e.g., via cron or a job runner). The
scheduler should not start a second copy while one is still running.

Usage:
    python scripts/scheduled_sync.py [--config CONFIG_PATH] [--max-attempts N]
"""

import argparse
import asyncio
import sys
from datetime import datetime

import structlog

from offline_sync.providers import build_sync_components
from offline_sync.utils.config_loader import ConfigLoader, ConfigurationError
from offline_sync.utils.logging_config import configure_logging_from_config

log = structlog.stdlib.get_logger()


async def perform_sync(config_path: str | None = None, max_attempts: int | None = None) -> dict:
    """
    Perform one scheduled synchronization.

    Args:
        config_path: Optional path to configuration file
        max_attempts: Optional override for sync.max_attempts

    Returns:
        Dictionary with sync statistics
    """
    start_time = datetime.now()

    try:
        config_loader = ConfigLoader()
        config = config_loader.load_config(config_path)
    except ConfigurationError as e:
        log.error("configuration_failed", error=str(e))
        return {"success": False, "error": str(e), "start_time": start_time.isoformat()}

    configure_logging_from_config(config.logging)
    config_loader.validate_config(config)

    if max_attempts is not None:
        config.sync.max_attempts = max_attempts

    components = build_sync_components(config)
    log.info("scheduled_sync_started", timestamp=start_time.isoformat())

    try:
        report = await components.manager.sync()
        versions = await components.version_store.get_change_list_versions()
        topics = await components.topics.get_all()
        news = await components.news.get_all()
    finally:
        await components.network.aclose()

    end_time = datetime.now()
    stats = {
        "success": report.success,
        "state": report.state.value,
        "attempts": report.attempt,
        "results": report.results,
        "topic_version": versions.topic_version,
        "news_resource_version": versions.news_resource_version,
        "topics_cached": len(topics),
        "news_resources_cached": len(news),
        "search_index_rebuilt": report.search_index_rebuilt,
        "start_time": start_time.isoformat(),
        "end_time": end_time.isoformat(),
        "duration_seconds": (end_time - start_time).total_seconds(),
    }

    log.info("scheduled_sync_finished", **stats)
    return stats


def main():
    """Main entry point for scheduled sync script."""
    parser = argparse.ArgumentParser(description="Scheduled change list synchronization")
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file",
        default=None,
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        help="Override the number of orchestration attempts",
        default=None,
    )

    args = parser.parse_args()

    stats = asyncio.run(perform_sync(config_path=args.config, max_attempts=args.max_attempts))

    print("\n" + "=" * 60)
    print("SYNCHRONIZATION SUMMARY")
    print("=" * 60)

    if stats.get("success"):
        print("Status: ✓ SUCCESS")
    else:
        print("Status: ✗ RETRY")
        if stats.get("error"):
            print(f"Error: {stats['error']}")

    for entity_type, ok in stats.get("results", {}).items():
        print(f"  {entity_type}: {'ok' if ok else 'failed'}")
    if "topic_version" in stats:
        print(f"Topic Version: {stats['topic_version']}")
        print(f"News Resource Version: {stats['news_resource_version']}")
        print(f"Topics Cached: {stats['topics_cached']}")
        print(f"News Resources Cached: {stats['news_resources_cached']}")
        print(f"Attempts: {stats['attempts']}")
        print(f"Duration: {stats['duration_seconds']:.2f} seconds")

    print("=" * 60)

    sys.exit(0 if stats.get("success") else 1)


if __name__ == "__main__":
    main()
