#!/usr/bin/env python3
"""
Startup script for the Tableside ordering agent
"""
import sys
from pathlib import Path

import uvicorn

from tableside.config.settings import HOST, LOG_LEVEL, PORT

current_dir = Path(__file__).parent


def main():
    """Start the FastAPI application"""
    print("Starting Tableside ordering agent...")
    print("=" * 50)

    # Check if .env file exists
    env_file = current_dir / ".env"
    if not env_file.exists():
        print("Warning: .env file not found. Using default configuration.")
        print("   Create a .env file with your API keys for full functionality.")
        print()

    # Start the server
    try:
        uvicorn.run(
            "tableside.app:app",
            host=HOST,
            port=PORT,
            reload=True,
            log_level=LOG_LEVEL.lower(),
            access_log=True
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
