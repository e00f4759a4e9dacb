import argparse
import json
import logging
import sys

from contentlab.adapters.dev_jobs import create_dev_scheduler
from contentlab.adapters.sqlite.migrator import SQLiteMigrator
from contentlab.app_shell.config import ConfigError, Settings, validate_ops_rules
from contentlab.app_shell.context import ServiceContext
from contentlab.domain.errors import StoreUnavailable
from contentlab.rules.loader import load_rules

logger = logging.getLogger("contentlab.cli")


def get_context(settings: Settings) -> ServiceContext:
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
    except (FileNotFoundError, ValueError, ConfigError) as e:
        logger.error("Cannot start: %s", e)
        sys.exit(1)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    return ServiceContext.create(settings.db_path, rules)


def handle_migrate(settings: Settings, args: argparse.Namespace) -> int:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    print(f"Applied {len(applied)} migrations.")
    return 0


def handle_publish_due(settings: Settings, args: argparse.Namespace) -> int:
    ctx = get_context(settings)
    try:
        report = ctx.publisher_job.run()
    except StoreUnavailable as e:
        logger.error("Publisher run failed: %s", e)
        return 2

    print(json.dumps(report.to_dict(), indent=2))
    return 1 if report.failed else 0


def handle_run_scheduler(settings: Settings, args: argparse.Namespace) -> int:
    ctx = get_context(settings)
    interval = args.interval or ctx.rules.scheduling.poll_interval_seconds
    scheduler = create_dev_scheduler(ctx.publisher_job, interval)

    scheduler.start()
    try:
        scheduler.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        scheduler.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contentlab", description="Content Lab CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply database migrations")
    subparsers.add_parser("publish-due", help="Publish all due scheduled content once")

    scheduler_parser = subparsers.add_parser(
        "run-scheduler", help="Publish due content on a fixed interval"
    )
    scheduler_parser.add_argument(
        "--interval", type=float, default=None, help="Seconds between runs (default from rules)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)
    settings = Settings()

    handlers = {
        "migrate": handle_migrate,
        "publish-due": handle_publish_due,
        "run-scheduler": handle_run_scheduler,
    }
    return handlers[args.command](settings, args)


if __name__ == "__main__":
    sys.exit(main())
