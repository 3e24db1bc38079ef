"""Console interface for the sales tracker."""

from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from salesdesk.catalog import reference_data
from salesdesk.demo import seed_demo_records
from salesdesk.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from salesdesk.list_view import (
    FilterState,
    export_filename,
    filter_options,
    format_currency,
    summarize,
)
from salesdesk.logging_setup import configure_logging
from salesdesk.services import TransactionService
from salesdesk.storage import JSONStorage


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_item(value: str) -> Dict[str, str]:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) > 3:
        raise argparse.ArgumentTypeError(
            "Item must be MARKING[,SERIAL_NUMBER[,SN_ENGINE]]"
        )
    parts += [""] * (3 - len(parts))
    return {"marking": parts[0], "serialNumber": parts[1], "snEngine": parts[2]}


def _load_service(data_dir: Path) -> TransactionService:
    return TransactionService(JSONStorage(data_dir))


def _format_record(record: Dict[str, Any]) -> str:
    lines = [
        f"[{record['id']}] {record['date']} {record['branch'] or '-'} {record['noPJB']}",
        f"  Customer: {record['customerName']} ({record['customerClassification']})",
        f"  Product: {record['quantity']} x {record['productType']}"
        f" | {record['product'] or '-'} | {record['mark'] or '-'}",
        f"  HPP: {format_currency(record['hpp'])} | Payment: {record['paymentScheme']}"
        f" | Sales Rep: {record['salesRepresentative']}",
    ]
    return "\n".join(lines) + "\n"


def _format_items(record: Dict[str, Any]) -> str:
    rows = []
    for index, item in enumerate(record["dynamicFields"], start=1):
        rows.append(
            f"  Item {index}: marking={item['marking'] or '-'}"
            f" serial={item['serialNumber'] or '-'} sn_engine={item['snEngine'] or '-'}"
        )
    return "\n".join(rows) + "\n"


def _filters_from_args(args: argparse.Namespace) -> FilterState:
    return FilterState.from_mapping({
        "search": args.search,
        "branch": args.branch,
        "month": args.month,
        "customerType": args.customer_type,
    })


def _confirm(prompt: str, reader: Callable[[str], str] = input) -> bool:
    try:
        answer = reader(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def handle_entry(args: argparse.Namespace, service: TransactionService) -> None:
    if args.command == "add":
        payload = {
            "date": args.date,
            "noPJB": args.no_pjb,
            "customerClassification": args.customer_classification,
            "customerName": args.customer_name,
            "quantity": args.quantity,
            "productType": args.product_type,
            "hpp": args.hpp,
            "paymentScheme": args.payment_scheme,
            "salesRepresentative": args.sales_representative,
            "dynamicFields": args.items,
        }
        record = service.add(payload)
        print("Entry added:\n" + _format_record(record.to_dict()))
    elif args.command == "list":
        records = service.fetch_all()
        shown = service.list(_filters_from_args(args))
        summary = summarize(len(records), len(shown))
        if summary.empty_reason == "no_data":
            print("No data entries found.")
            return
        if summary.empty_reason == "no_match":
            print("No data entries found. Try adjusting your filters or search terms.")
            return
        print(f"Showing {summary.label}:")
        for record in shown:
            print(_format_record(record.to_dict()))
    elif args.command == "show":
        record = service.get(args.id).to_dict()
        print(_format_record(record) + _format_items(record))
    elif args.command == "delete":
        if not args.yes and not _confirm(f"Delete entry {args.id}? This cannot be undone."):
            print("Deletion cancelled.")
            return
        if service.delete_by_id(args.id):
            print(f"Entry {args.id} deleted.")
        else:
            print(f"Entry {args.id} not found; nothing deleted.")
    elif args.command == "export":
        content = service.export(_filters_from_args(args))
        output = args.output or Path(export_filename())
        output.write_text(content + "\n", encoding="utf-8")
        print(f"Exported to {output}")


def handle_reference(args: argparse.Namespace, service: TransactionService) -> None:
    payload: Dict[str, Any] = reference_data()
    if args.present:
        payload = filter_options(service.fetch_all())
    print(json.dumps(payload, indent=2))


def handle_seed(args: argparse.Namespace, service: TransactionService) -> None:
    added = seed_demo_records(service)
    if added:
        print(f"Seeded {added} demo entries.")
    else:
        print("Store is not empty; nothing seeded.")


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--search", help="Match customer, No. PJB, product type or sales rep")
    parser.add_argument("--branch")
    parser.add_argument("--month", help='Month label, e.g. "January 2024"')
    parser.add_argument("--customer-type", dest="customer_type")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sales Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=Path(os.getenv("SALES_TRACKER_DATA_DIR") or "data"),
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $SALES_TRACKER_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="entity", required=True)

    entry_parser = subparsers.add_parser("entry", help="Manage sales entries")
    entry_sub = entry_parser.add_subparsers(dest="command", required=True)

    entry_add = entry_sub.add_parser("add", help="Add a new entry")
    entry_add.add_argument("date", type=_parse_date)
    entry_add.add_argument("no_pjb")
    entry_add.add_argument("customer_classification")
    entry_add.add_argument("customer_name")
    entry_add.add_argument("product_type")
    entry_add.add_argument("hpp")
    entry_add.add_argument("payment_scheme")
    entry_add.add_argument("sales_representative")
    entry_add.add_argument("--quantity", type=int, default=1)
    entry_add.add_argument(
        "--item",
        dest="items",
        action="append",
        type=_parse_item,
        default=[],
        help="MARKING,SERIAL_NUMBER,SN_ENGINE for the next unit (repeatable)",
    )

    entry_list = entry_sub.add_parser("list", help="List entries")
    _add_filter_arguments(entry_list)

    entry_show = entry_sub.add_parser("show", help="Show one entry with its product details")
    entry_show.add_argument("id")

    entry_delete = entry_sub.add_parser("delete", help="Delete an entry")
    entry_delete.add_argument("id")
    entry_delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    entry_export = entry_sub.add_parser("export", help="Export the filtered entries as CSV")
    _add_filter_arguments(entry_export)
    entry_export.add_argument("--output", type=Path)

    reference_parser = subparsers.add_parser("reference", help="Show form drop-down data")
    reference_parser.add_argument(
        "--present",
        action="store_true",
        help="Only list filter values present in stored entries",
    )

    subparsers.add_parser("seed", help="Load the demo entries into an empty store")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        service = _load_service(args.data_dir)
        if args.entity == "entry":
            handle_entry(args, service)
        elif args.entity == "reference":
            handle_reference(args, service)
        elif args.entity == "seed":
            handle_seed(args, service)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print("Validation error:", file=sys.stderr)
        for field, message in (exc.errors or {"": str(exc)}).items():
            print(f"  {field + ': ' if field else ''}{message}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        hint = " (try again)" if exc.retryable else ""
        print(f"Storage error: {exc}{hint}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
