#!/usr/bin/env python3
"""
CLI tool to start the eventflow FastAPI web server.

Usage:
    python3 web_server.py                    # Start with defaults
    python3 web_server.py --host 0.0.0.0     # Listen on all interfaces
    python3 web_server.py --port 8080        # Use custom port
    python3 web_server.py --reload           # Enable auto-reload for development

Environment Variables:
    EVENTFLOW_DB_URL: PostgreSQL database URL
    EVENTFLOW_ENV: Environment (production/development, default: development)
    EVENTFLOW_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
    JWT_SECRET_KEY: Secret for identity tokens (required in production)
    SESSION_SECRET_KEY: Secret for session cookies (optional)
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from backend/.env.

    Variables already present in the environment take precedence.
    """
    env_path = Path(__file__).parent / "backend" / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def validate_secrets() -> None:
    """
    Refuse to start a production server without JWT_SECRET_KEY.

    Raises:
        SystemExit: If running in production without a token secret
    """
    is_production = os.environ.get("EVENTFLOW_ENV", "development").lower() == "production"
    if is_production and not os.environ.get("JWT_SECRET_KEY"):
        print(
            "\n" + "=" * 70,
            "\nERROR: JWT_SECRET_KEY environment variable is not set.",
            "\n\nA production server needs a secret (at least 32 characters)",
            "\nto verify identity tokens. Generate one with:",
            "\n  openssl rand -hex 32",
            "\n" + "=" * 70 + "\n",
            file=sys.stderr
        )
        sys.exit(1)


def parse_arguments() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Arguments:
        --host: Host to bind (default: 127.0.0.1)
        --port: Port to bind (default: 8000)
        --reload: Enable auto-reload for development (default: False)
    """
    parser = argparse.ArgumentParser(
        description="Start the eventflow FastAPI web server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start development server with auto-reload
  python3 web_server.py --reload

  # Production configuration
  EVENTFLOW_ENV=production python3 web_server.py --host 0.0.0.0 --port 8000

Environment Variables:
  EVENTFLOW_DB_URL       PostgreSQL database URL
  EVENTFLOW_ENV          Environment (production/development)
  EVENTFLOW_LOG_LEVEL    Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
  JWT_SECRET_KEY         Identity token secret
  SESSION_SECRET_KEY     Session cookie secret
        """
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1). "
             "Use 0.0.0.0 to listen on all interfaces."
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the server to (default: 8000)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development. Not recommended for production."
    )

    return parser.parse_args()


def main() -> None:
    """
    Main entry point for the web server CLI tool.

    Exit Codes:
        0: Server stopped normally
        1: Secret validation failed
    """
    args = parse_arguments()

    # Ensure the repo root is on sys.path so "backend.src.main" is importable
    repo_root = str(Path(__file__).parent)
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)

    load_env_file()
    validate_secrets()

    import uvicorn

    print("\nStarting eventflow web server...")
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Auto-reload: {'enabled' if args.reload else 'disabled'}")
    print(f"\nAPI documentation: http://{args.host}:{args.port}/docs")
    print(f"Health check: http://{args.host}:{args.port}/health")
    print("\nPress CTRL+C to stop the server\n")

    try:
        uvicorn.run(
            "backend.src.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped by user (CTRL+C)")
        sys.exit(0)


if __name__ == "__main__":
    main()
