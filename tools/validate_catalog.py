from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from power3_core.catalog import catalog_coverage, load_catalog
from power3_core.config import load_config
from power3_core.errors import InconsistentCatalogError

log = logging.getLogger("validate_catalog")


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Catalog Coverage ===")
    for domain, data in coverage.items():
        print(f"\nDomain: {domain} ({data['questions']} questions)")
        comps: dict[str, int] = data["components"]  # type: ignore[assignment]
        for comp, n in comps.items():
            print(f"  {comp:<20} {n:3d}")

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotal questions:", summary["total"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/catalog_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        catalog = load_catalog(args[0] if args else load_config().get("QUESTIONS_PATH"))
    except InconsistentCatalogError as e:
        log.error("catalog is inconsistent: %s", e)
        return 1
    summary = catalog_coverage(catalog)
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
