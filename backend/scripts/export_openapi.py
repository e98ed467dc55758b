"""Write or verify the OpenAPI document of the entity API.

    python backend/scripts/export_openapi.py [OUTPUT] [--check]

``--check`` compares OUTPUT with the runtime schema and exits 1 when the
snapshot is stale, without rewriting it.
"""
import argparse
import json
import os
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_OUTPUT = BACKEND_ROOT / "openapi" / "openapi.json"


def render_schema() -> str:
    if str(BACKEND_ROOT) not in sys.path:
        sys.path.insert(0, str(BACKEND_ROOT))
    # Building the app never opens a connection; an in-memory URL avoids needing a driver.
    os.environ.setdefault("DATABASE_URL", "sqlite://")
    from app.main import app  # noqa: WPS433

    return json.dumps(app.openapi(), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("output", nargs="?", type=Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--check", action="store_true", help="fail if OUTPUT is out of date")
    args = parser.parse_args(argv)

    rendered = render_schema()
    if args.check:
        current = args.output.read_text(encoding="utf-8") if args.output.exists() else ""
        if current != rendered:
            print(f"OpenAPI snapshot is out of date: {args.output}", file=sys.stderr)
            return 1
        print(f"OpenAPI snapshot is current: {args.output}")
        return 0

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(rendered, encoding="utf-8")
    print(f"OpenAPI exported to: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
