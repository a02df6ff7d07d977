"""Application entrypoint for the tension watch ingestion service.

This script wires the ingestion cycle together:
1) load configuration and credentials
2) build the fetcher, gateways, store and dispatcher
3) run one cycle (--once), print the tension status (--status), or run the
   fixed-interval scheduler until SIGINT/SIGTERM
"""

from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone
from pathlib import Path

from .fetchers import GNewsProvider, MultiSourceFetcher, NewsAPIProvider
from .orchestrator import CycleOrchestrator
from .output.dispatcher import AlertDispatcher
from .output.telegram import TelegramChannel
from .processors.classify import ClassificationGateway
from .processors.tension import classify_tension_level, summarize_history
from .processors.translate import TranslationGateway
from .scheduler import IntervalScheduler
from .store import EventStore, LocalStore, StoreError
from .utils.config_loader import ConfigError, WatchConfig, load_watch_config
from .utils.logging import configure_logging, get_logger
from .utils.ratelimit import FixedIntervalLimiter
from .utils.settings import Settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Tension watch: fetch conflict news, score tension and dispatch alerts"
    )
    parser.add_argument(
        "--config",
        default="config/watch.yaml",
        help="Path to the watch configuration file (YAML)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single ingestion cycle and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Use the local store and log notifications instead of sending them",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print the current tension level and 24h statistics, then exit",
    )
    parser.add_argument(
        "--store",
        choices=["supabase", "local"],
        default=None,
        help="Persistence backend (default: supabase when configured, else local)",
    )
    parser.add_argument(
        "--local-store-path",
        default="data/tensionwatch.json",
        help="JSON snapshot file for the local store",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def build_store(args: argparse.Namespace, settings: Settings, config: WatchConfig) -> EventStore:
    backend = args.store or ("local" if args.dry_run or not settings.has_supabase else "supabase")
    if backend == "local":
        return LocalStore(store_path=args.local_store_path)

    from .store.supabase import SupabaseStore

    return SupabaseStore(
        settings.supabase_url,
        settings.supabase_key,
        timeout=config.store_timeout_seconds,
    )


def build_orchestrator(
    config: WatchConfig,
    settings: Settings,
    store: EventStore,
    *,
    dry_run: bool = False,
) -> CycleOrchestrator:
    provider_opts = dict(
        language=config.language,
        page_size=config.page_size,
        timeout=config.provider_timeout_seconds,
    )
    fetcher = MultiSourceFetcher(
        [
            NewsAPIProvider(settings.news_api_key, **provider_opts),
            GNewsProvider(settings.gnews_api_key, **provider_opts),
        ],
        config.keywords,
        limiter=FixedIntervalLimiter(config.keyword_interval_seconds),
    )
    channel = TelegramChannel(
        settings.telegram_bot_token,
        timeout=config.notification_timeout_seconds,
        dry_run=dry_run,
    )
    dispatcher = AlertDispatcher(store, channel, global_chat_id=settings.telegram_chat_id)
    return CycleOrchestrator(
        fetcher,
        store,
        ClassificationGateway(timeout=config.classifier_timeout_seconds),
        TranslationGateway(timeout=config.classifier_timeout_seconds),
        dispatcher,
        initial_tension=config.initial_tension,
        limiter=FixedIntervalLimiter(config.article_interval_seconds),
    )


def print_status(store: EventStore, config: WatchConfig) -> None:
    latest = store.get_latest_tension_sample()
    value = latest.value if latest is not None else config.initial_tension
    level = classify_tension_level(value)
    print(f"Tension: {value:.2f} [{level.label}]")

    since = datetime.now(timezone.utc) - timedelta(hours=24)
    stats = summarize_history(store.list_tension_samples(since))
    if stats is None:
        print("No tension samples in the last 24h")
    else:
        print(f"24h: min={stats.min:.2f} max={stats.max:.2f} avg={stats.avg:.2f} current={stats.current:.2f}")


def main(argv: list[str] | None = None) -> int:
    # Optional: load .env
    try:
        from dotenv import load_dotenv

        load_dotenv(override=False)
    except ImportError:
        pass
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("tw.agent")

    config_path = Path(args.config)
    logger.info("Loading watch configuration from %s", config_path)
    try:
        config = load_watch_config(config_path)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    settings = Settings.from_env()
    try:
        store = build_store(args, settings, config)
    except StoreError as exc:
        logger.error("Cannot open store: %s", exc)
        return 1

    if args.status:
        print_status(store, config)
        return 0

    if not (settings.news_api_key or settings.gnews_api_key):
        logger.warning("Neither NEWS_API_KEY nor GNEWS_API_KEY is set; cycles will fetch nothing")

    orchestrator = build_orchestrator(config, settings, store, dry_run=args.dry_run)

    if args.once:
        report = orchestrator.run_cycle()
        if report is not None:
            print(report.to_markdown())
        return 0

    scheduler = IntervalScheduler(orchestrator.run_cycle, config.cycle_interval_seconds)
    scheduler.install_signal_handlers()
    scheduler.run_forever()
    scheduler.join(timeout=config.provider_timeout_seconds)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
