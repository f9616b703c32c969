"""Main entry point for the remote-write demo."""
import argparse
import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from remote_write_demo.config import QuerySpec, load_config
from remote_write_demo.demo import generate_and_send, run_demo
from remote_write_demo.query import QueryClient

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def build_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for ``text`` or ``json`` output."""
    if log_format == "json":
        return JsonFormatter(
            JSON_FIELDS,
            datefmt=DATE_FORMAT,
            rename_fields={"asctime": "time", "levelname": "level", "name": "logger"},
        )
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(log_format))
    logging.basicConfig(level=level, handlers=[handler])

    # Reduce noise from some libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prometheus remote-write demo - send samples and verify them by query"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="Path to configuration YAML file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("send", "Generate and send one batch of metrics"),
        ("test", "Health check, send, then query the results"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--mode",
            choices=["full", "simple"],
            default="full" if command == "send" else "simple",
            help="full: store/scrape/encode path; simple: name->value push helper"
        )

    query = subparsers.add_parser("query", help="Run PromQL instant queries")
    query.add_argument("expressions", nargs="+", help="PromQL expressions")

    return parser


def main(argv=None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.global_.log_level, config.global_.log_format)
    logger = logging.getLogger(__name__)
    logger.debug(f"Configuration loaded from: {args.config or 'defaults'}")

    if args.command == "send":
        generate_and_send(config, args.mode)
        return 0

    if args.command == "test":
        return run_demo(config, args.mode)

    query_client = QueryClient(config.prometheus)
    query_client.run_queries([QuerySpec(query=e, name=e) for e in args.expressions])
    return 0


if __name__ == "__main__":
    sys.exit(main())
