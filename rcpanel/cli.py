"""
RCPanel - Command Line Module

Parses the command line, sets up logging and runs the web server.

Author: RCPanel Project
"""

import argparse
import logging
import sys
import time
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Tuple

import uvicorn

from rcpanel import __version__, engine
from rcpanel.managers import ConfigManager

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def setup_logging(config_manager: ConfigManager) -> Path:
    """
    Setup logging to the console and a daily rotating log file.

    Creates log file with format: rcpanel-YYYY-MM-DD.log in a "logs"
    subdirectory next to config.json. Log files older than
    log_retention_days are removed, except the one just opened.

    Args:
        config_manager: ConfigManager instance for log settings

    Returns:
        Path to the log file
    """
    log_level = config_manager.get("log_level", "INFO")

    # Create logs directory if it doesn't exist
    log_dir = config_manager.base_dir / "logs"
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"rcpanel-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )

    logger = logging.getLogger(__name__)
    logger.info(f"RCPanel {__version__} - Log file: {log_file}")
    logger.info(f"Log level: {log_level}")

    retention_days = int(config_manager.get("log_retention_days", 30))
    removed = _remove_expired_logs(log_dir, log_file, retention_days)
    if removed:
        logger.info(f"Removed {removed} log file(s) older than {retention_days} days")

    return log_file


def _remove_expired_logs(log_dir: Path, keep: Path, retention_days: int) -> int:
    """Delete rcpanel-*.log files (and their rotated backups) not modified within retention_days."""
    if retention_days <= 0:
        return 0

    cutoff = time.time() - retention_days * 86400
    removed = 0
    for path in log_dir.glob("rcpanel-*.log*"):
        if path == keep or path.stat().st_mtime >= cutoff:
            continue
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            logging.getLogger(__name__).warning(f"Could not remove old log {path.name}: {e}")
    return removed



def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a listen address.

    Accepts "HOST:PORT", ":PORT" (all interfaces) or "PORT".

    Raises:
        ValueError: If the port is not a number
    """
    host, separator, port = address.rpartition(":")
    if not host:
        host = "0.0.0.0" if separator else "127.0.0.1"
    return host, int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcpanel",
        description="Web control panel for the rclone remote control API"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs="?", default="serve", choices=["serve"],
                        help="Command to run (default: serve)")
    parser.add_argument("--addr", help="HTTP listen address, HOST:PORT (default: 127.0.0.1:8080)")
    parser.add_argument("--rclone", help="rclone RC API URL (default: http://localhost:5572)")
    parser.add_argument("--user", help="rclone RC username")
    parser.add_argument("--pass", dest="password", help="rclone RC password")
    parser.add_argument("--embedded", action="store_true",
                        help="Run rclone in-process through librclone instead of connecting to rclone rcd")
    parser.add_argument("--library", help="Path to the librclone shared library")
    parser.add_argument("--save-credentials", action="store_true",
                        help="Store --user in config.json and --pass in the OS credential store")
    parser.add_argument("--config-dir", help="Directory holding config.json (default: current directory)")
    return parser


def apply_arguments(config_manager: ConfigManager, args: argparse.Namespace):
    """
    Override configuration with command line arguments.

    Priority: command-line argument > environment > config.json > defaults
    """
    if args.addr:
        host, port = parse_address(args.addr)
        config_manager.config["listen_host"] = host
        config_manager.config["listen_port"] = port
    if args.rclone:
        config_manager.config["rclone_url"] = args.rclone
    if args.user:
        config_manager.config["rclone_user"] = args.user
    if args.embedded:
        config_manager.config["backend"] = "embedded"
    if args.library:
        config_manager.config["library_path"] = args.library


def serve(config_manager: ConfigManager, password: Optional[str] = None) -> int:
    """
    Run the web server until interrupted.

    Args:
        config_manager: Loaded configuration
        password: RC password given on the command line

    Returns:
        Exit code
    """
    from rcpanel.server import CreateApp

    logger = logging.getLogger(__name__)

    client = engine.InitializeEngine(config_manager)
    if password and config_manager.get("backend") == "http":
        client.with_auth(config_manager.get("rclone_user") or "", password)

    host = config_manager.get("listen_host")
    port = int(config_manager.get("listen_port"))
    app = CreateApp(client, poll_interval=float(config_manager.get("poll_interval_seconds", 2)))

    logger.info(f"Starting RCPanel on http://{host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        engine.ShutdownEngine()
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    args = build_parser().parse_args(argv)
    logger = None

    try:
        config_mgr = ConfigManager(Path(args.config_dir) if args.config_dir else None)
        config_mgr.load_config()
        try:
            apply_arguments(config_mgr, args)
        except ValueError:
            print(f"Invalid listen address: {args.addr}", file=sys.stderr)
            return EXIT_CONFIG_ERROR

        error = config_mgr.validate()
        if error:
            print(f"Configuration error: {error}", file=sys.stderr)
            return EXIT_CONFIG_ERROR

        setup_logging(config_mgr)
        logger = logging.getLogger(__name__)

        if args.save_credentials:
            if not args.user or not args.password:
                logger.error("--save-credentials requires --user and --pass")
                return EXIT_CONFIG_ERROR
            config_mgr.store_credentials(args.user, args.password)

        return serve(config_mgr, args.password)

    except KeyboardInterrupt:
        if logger:
            logger.warning("Interrupted by user (Ctrl+C)")
        return EXIT_SUCCESS

    except Exception as e:
        if logger:
            logger.exception(f"Unexpected error: {e}")
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
