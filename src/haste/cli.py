"""Command line entry point.

    haste [options] upload /path/to/files my-container
    haste [options] download my-container /path/to/files
    haste [options] delete my-container
    haste [options] list [my-container]
"""

from __future__ import annotations

import argparse
import os
import sys

from haste.config.transfer_config import DEFAULT_CONCURRENCY, TransferConfig, get_transfer_config
from haste.errors import HasteError
from haste.logging_config import configure_logging, get_logger
from haste import runner

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="haste",
        description="Concurrent bulk upload, download, delete and listing for object-store containers.",
    )
    parser.add_argument("--username", default=os.getenv("OS_USERNAME"), help="Username to authenticate with. Defaults to OS_USERNAME")
    parser.add_argument("--password", default=os.getenv("OS_PASSWORD"), help="API key to authenticate with. Defaults to OS_PASSWORD")
    parser.add_argument("--region", default=os.getenv("OS_REGION_NAME"), help="Region to operate in. Defaults to OS_REGION_NAME")
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help=f"Number of concurrent operations. Defaults to HASTE_CONCURRENCY or {DEFAULT_CONCURRENCY}",
    )
    parser.add_argument("--identity-url", default=None, help="Identity endpoint. Defaults to HASTE_IDENTITY_URL")
    parser.add_argument("--log-level", default=None, help="Log level. Defaults to LOG_LEVEL or INFO")

    subparsers = parser.add_subparsers(dest="operation", metavar="{upload,download,delete,list}")
    subparsers.required = True

    upload = subparsers.add_parser("upload", help="Upload a directory tree into a container")
    upload.add_argument("source", help="Local directory to upload")
    upload.add_argument("container", help="Destination container, created if missing")

    download = subparsers.add_parser("download", help="Download every object of a container")
    download.add_argument("container", help="Source container")
    download.add_argument("destination", help="Local directory to write into")

    delete = subparsers.add_parser("delete", help="Delete every object of a container")
    delete.add_argument("container", help="Container to empty")

    listing = subparsers.add_parser("list", help="List a container, or the account's containers")
    listing.add_argument("container", nargs="?", default=None, help="Container to list")
    return parser


def _resolve_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> TransferConfig:
    missing = [flag for flag, value in (("--username", args.username), ("--password", args.password), ("--region", args.region)) if not value]
    if missing:
        parser.error(f"missing required options: {', '.join(missing)}")
    try:
        return get_transfer_config(
            username=args.username,
            api_key=args.password,
            region=args.region,
            concurrency=args.concurrency,
            identity_url=args.identity_url,
        )
    except ValueError as exc:
        parser.error(str(exc))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return EXIT_USAGE if exc.code else EXIT_OK
    configure_logging(level=args.log_level, service="haste")

    try:
        config = _resolve_config(parser, args)
    except SystemExit:
        return EXIT_USAGE

    try:
        if args.operation == "upload":
            runner.run_upload(config, args.source, args.container)
        elif args.operation == "download":
            runner.run_download(config, args.container, args.destination)
        elif args.operation == "delete":
            runner.run_delete(config, args.container)
        else:
            for key in runner.list_keys(config, args.container):
                sys.stdout.write(f"{key}\n")
            sys.stdout.flush()
    except (HasteError, ValueError) as exc:
        logger.error("Fatal: operation=%s error=%s", args.operation, exc)
        return EXIT_FATAL
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
