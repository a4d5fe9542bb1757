"""CLI entry point: python -m rubberengine.mcp [catalog_module]"""

from __future__ import annotations

import sys


def main() -> None:
    module_path = sys.argv[1] if len(sys.argv) > 1 else None

    # Redirect stdout to stderr during module loading in case define_catalog() prints
    real_stdout = sys.stdout
    sys.stdout = sys.stderr
    try:
        from rubberengine.cli import load_catalog

        catalog = load_catalog(module_path)
    finally:
        sys.stdout = real_stdout

    from rubberengine.mcp.server import create_server

    server = create_server(catalog)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
