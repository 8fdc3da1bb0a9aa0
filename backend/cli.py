import json
import argparse
import sys

from backend.core.migrations import migrate
from infrastructure.catalog import YamlExerciseCatalog


def _is_envelope(data) -> bool:
    return isinstance(data, dict) and isinstance(data.get("state"), dict) and "metadata" in data


def migrate_command(args) -> int:
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        return 1

    catalog = YamlExerciseCatalog(args.catalog)

    # Full slot envelopes keep their userId and metadata
    if _is_envelope(data):
        result = migrate(data["state"], catalog)
        output = dict(data, state=result.state.to_blob())
    else:
        result = migrate(data if isinstance(data, dict) else {}, catalog)
        output = result.state.to_blob()

    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)

    text = json.dumps(output, indent=2, ensure_ascii=False)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    else:
        print(text)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="IronLog state maintenance tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Upgrade a stored state blob to the current schema")
    migrate_parser.add_argument("input", help="Input JSON file (state blob or slot envelope)")
    migrate_parser.add_argument("-o", "--output", help="Output JSON file path (default: stdout)")
    migrate_parser.add_argument("--catalog", help="Exercise catalog YAML (default: bundled sample)")
    migrate_parser.set_defaults(func=migrate_command)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
