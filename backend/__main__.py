"""
Entry point for running the application with `python -m backend`.

Part of IRL-13: HTTP surface
"""
import argparse

import uvicorn
from dotenv import load_dotenv


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Run the IronLog Progression API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8001)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    # Must run before backend.main is imported
    load_dotenv()
    uvicorn.run("backend.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
