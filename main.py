#!/usr/bin/env python3
"""
Biometric sign-in monitor server.
Receives fingerprint events from the scanning device and serves the dashboard API.
"""
import argparse
import sys

from api.api_server import BiometricServer
from utils.config import config
from utils.logger import logger

def print_banner(host: str, port: int):
    """Print startup information."""
    print("=" * 60)
    print("  Biometric Sign-In Monitor Server")
    print("=" * 60)
    print(f"Server running on {host}:{port}")
    print(f"History limit: {config.ledger.max_history} entries "
          f"(duplicate window {config.ledger.duplicate_tolerance_ms} ms)")
    print("API Endpoints:")
    print("  POST   /fingerprint-data  - Receive data from the scanning device")
    print("  GET    /api/data          - Get all entries")
    print("  GET    /api/data/latest   - Get latest entry")
    print("  GET    /api/stats         - Get statistics")
    print("  GET    /api/sessions      - Get active sessions")
    print("  DELETE /api/data          - Clear all data")
    print("  GET    /pi-status         - Read device command bit")
    print("  POST   /pi-status         - Set device command bit")
    print("  GET    /health            - Health check")
    print("Note: all data is kept in memory and is lost when the server stops")
    print("=" * 60)

def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Biometric Sign-In Monitor Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                           # Start on the configured host and port
  python main.py --port 8080               # Listen on port 8080
  python main.py --max-history 500         # Keep the last 500 entries
  streamlit run web/web_interface.py       # Launch the dashboard
        """
    )
    parser.add_argument("--host", type=str, default=config.server.host,
                       help=f"Bind address (default: {config.server.host})")
    parser.add_argument("--port", "-p", type=int, default=config.server.port,
                       help=f"Port (default: {config.server.port})")
    parser.add_argument("--max-history", type=int,
                       help="Number of entries kept in memory")
    parser.add_argument("--tolerance-ms", type=int,
                       help="Duplicate suppression window in milliseconds")
    parser.add_argument("--log-level", choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help="Set logging level")
    parser.add_argument("--verbose", "-v", action="store_true",
                       help="Enable verbose logging")

    args = parser.parse_args(argv)

    # Validate arguments
    if args.max_history is not None and args.max_history < 1:
        print("Error: --max-history must be positive")
        return 1
    if args.tolerance_ms is not None and args.tolerance_ms < 0:
        print("Error: --tolerance-ms must be non-negative")
        return 1

    if args.max_history is not None:
        config.update_ledger_config(max_history=args.max_history)
    if args.tolerance_ms is not None:
        config.update_ledger_config(duplicate_tolerance_ms=args.tolerance_ms)

    if args.verbose:
        config.logging.log_level = "DEBUG"
    elif args.log_level:
        config.logging.log_level = args.log_level
    logger.set_level(config.logging.log_level)

    print_banner(args.host, args.port)
    logger.info(f"Configuration: {config.get_effective_config()}")

    try:
        server = BiometricServer()
        server.run(host=args.host, port=args.port)
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1
    finally:
        logger.shutdown()

    return 0

if __name__ == "__main__":
    sys.exit(main())
