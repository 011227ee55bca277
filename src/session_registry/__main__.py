#!/usr/bin/env python3
"""
Command-line entry point: print freshly issued session ids.
"""

import argparse
import logging
import sys

from session_registry import InvalidConfigurationError, create_session_registry, load_registry_settings


def main(argv=None):
    """Issue session ids from an environment-configured registry."""
    parser = argparse.ArgumentParser(description="Issue unique session ids")
    parser.add_argument("--length", type=int, help="Id length (overrides SESSION_REGISTRY_ID_LENGTH)")
    parser.add_argument("--count", type=int, default=1, help="Number of ids to issue")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.debug else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger("session_registry")

    settings = load_registry_settings()
    if args.length is not None:
        settings.id_length = args.length

    try:
        registry = create_session_registry(settings=settings)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Ids stay registered until exit so every printed id is unique
    for index in range(max(args.count, 0)):
        print(registry.start({"cli_index": index}))


if __name__ == "__main__":
    main()
