"""Terminal client that runs the search pipeline in-process."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from time import perf_counter
from typing import Iterable, Sequence

from catalog_search.catalog import CatalogLoadError, load_products
from catalog_search.config import settings
from catalog_search.models import Product
from catalog_search.search import analyze_query, run_plan

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def perform_query(products: Sequence[Product], query: str) -> dict:
    start = perf_counter()
    plan = analyze_query(query)
    results = run_plan(products, plan)
    return {
        "intent": plan.intent.value if plan.intent else "-",
        "variants": list(plan.variants),
        "results": results,
        "eta_ms": (perf_counter() - start) * 1000,
    }


def pretty_print_response(query: str, payload: dict) -> None:
    results = payload.get("results", [])
    eta = float(payload.get("eta_ms", 0))
    color = GREEN if eta < 50 else RED
    eta_label = f"{color}{eta:.2f} ms{RESET}"
    print(f"Query: {query} | intent: {payload.get('intent')} | results: {len(results)} | ETA: {eta_label}")
    variants = payload.get("variants") or []
    if len(variants) > 1:
        print(f"  variants: {', '.join(variants)}")
    for idx, item in enumerate(results, start=1):
        print(f"  {idx:02d}. {item.code} | {item.name} | {item.category or '-'}")


def interactive_shell(products: Sequence[Product]) -> None:
    print("Interactive catalog search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(query, perform_query(products, query))


def batch_mode(products: Sequence[Product], file_path: Path) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(query, perform_query(products, query))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the catalog search")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, default=Path(settings.catalog_path), help="Products JSON file")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline details")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        products = load_products(args.catalog)
    except CatalogLoadError as exc:
        print(f"{RED}Cannot load catalog: {exc}{RESET}")
        return 1

    if args.batch:
        batch_mode(products, args.batch)
        return 0
    if args.query:
        pretty_print_response(args.query, perform_query(products, args.query))
        return 0
    interactive_shell(products)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
