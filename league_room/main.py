"""
Main CLI entry point for the league room service.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import config
from .errors import UpstreamFetchError


def setup_logging(verbose: bool = False):
    """
    Configure logging for the application.

    Args:
        verbose: Enable verbose (DEBUG) logging
    """
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=config.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Shared League Room Server',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the room on the default host/port
  python -m league_room.main

  # Serve on all interfaces with a custom state directory
  python -m league_room.main --host 0.0.0.0 --port 8080 --data-dir /var/lib/league_room

  # Print the current live fantasy scores and exit
  python -m league_room.main --live-scores
        """
    )

    parser.add_argument(
        '--host',
        type=str,
        default=config.API_HOST,
        help=f'Interface to bind (default: {config.API_HOST})'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=config.API_PORT,
        help=f'Port to listen on (default: {config.API_PORT})'
    )

    parser.add_argument(
        '--data-dir',
        type=str,
        default=config.DATA_DIR,
        help=f'Directory for the persisted room document (default: {config.DATA_DIR})'
    )

    parser.add_argument(
        '--static-dir',
        type=str,
        default=config.STATIC_DIR,
        help=f'Front-end build served at / when present (default: {config.STATIC_DIR})'
    )

    parser.add_argument(
        '--live-scores',
        action='store_true',
        help='Fetch and print live fantasy scores once instead of serving'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def run_server(args):
    """Serve the room API under uvicorn until interrupted."""
    import uvicorn

    from .room.api_server import create_app

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info(f"{config.SERVICE_NAME} v{config.SERVICE_VERSION}")
    logger.info("=" * 60)
    logger.info(f"Listening on http://{args.host}:{args.port}")
    logger.info(f"Tracked teams: {', '.join(sorted(config.TRACKED_TEAMS))}")

    app = create_app(data_dir=Path(args.data_dir), static_dir=Path(args.static_dir))
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level='debug' if args.verbose else 'info'
    )


def run_live_scores(args) -> int:
    """Print the live scores payload once. Returns the process exit code."""
    from .espn_client import EspnClient
    from .live_scores import build_live_scores

    logger = logging.getLogger(__name__)
    client = EspnClient()
    try:
        payload = build_live_scores(client)
    except UpstreamFetchError as e:
        logger.error(f"Live scores unavailable: {e}")
        print(json.dumps({'success': False, 'error': str(e)}, indent=2))
        return 1
    finally:
        client.close()

    print(json.dumps(payload, indent=2))
    return 0


def main(argv=None):
    """Main execution function with mode branching."""
    args = parse_arguments(argv)

    setup_logging(args.verbose)

    if args.live_scores:
        sys.exit(run_live_scores(args))

    try:
        run_server(args)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Server interrupted by user")


if __name__ == '__main__':
    main()
