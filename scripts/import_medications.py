import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import StockControlError
from app.core.logging import setup_logging
from app.services.ingestion_service import import_workbook, summarize_results


def parse_args():
    parser = argparse.ArgumentParser(
        description="Register medications and take stock from an Excel workbook."
    )
    parser.add_argument("--path", required=True, help="Path to .xlsx workbook.")
    parser.add_argument(
        "--sheet",
        default=None,
        help="Sheet to import. Default: 'medications' or the only sheet.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Validate without saving.")
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    try:
        results = import_workbook(args.path, sheet=args.sheet, dry_run=args.dry_run)
    except (OSError, ValueError, StockControlError, SQLAlchemyError, InvalidFileException) as exc:
        raise SystemExit(f"Import failed: {exc}") from exc

    print(summarize_results(results))
    for change in results["adjustments"]:
        print(
            f"  #{change['medication_id']} {change['name']}: "
            f"{change['old_quantity']} -> {change['new_quantity']}"
        )

    if args.dry_run:
        print("Dry run complete, no changes committed.")
    else:
        print("Import complete.")


if __name__ == "__main__":
    main()
