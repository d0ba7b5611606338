import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from openpyxl import load_workbook
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.core.constants import ADJUST_SET, MAX_STOCK_QUANTITY
from app.core.errors import StockControlError
from app.database import Base, SessionLocal, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.models.medication import Medication
from app.models.supplier import MedicationSupplier
from app.schemas.medication import MedicationCreate
from app.services.medication_service import add_medication
from app.services.stock_service import record_adjustment
from app.services.supplier_service import find_supplier_by_name

logger = logging.getLogger(__name__)

MEDICATIONS_SHEET = "medications"
STOCK_TAKE_REASON = "Stock take import"

HEADER_ALIASES = {
    "medication": "name",
    "medication_name": "name",
    "drug": "name",
    "drug_name": "name",
    "generic": "generic_name",
    "genericname": "generic_name",
    "strength": "dosage",
    "dose": "dosage",
    "batch": "batch_number",
    "batch_no": "batch_number",
    "lot": "batch_number",
    "lot_number": "batch_number",
    "expiry": "expiry_date",
    "expires": "expiry_date",
    "exp_date": "expiry_date",
    "qty": "quantity",
    "stock": "quantity",
    "on_hand": "quantity",
    "min_stock": "min_stock_level",
    "reorder_level": "min_stock_level",
    "minstocklevel": "min_stock_level",
    "price": "unit_price",
    "unitprice": "unit_price",
    "supplier": "supplier_name",
    "vendor": "supplier_name",
}

REQUIRED_COLUMNS = {"name", "quantity"}

_FIELD_COLUMNS = (
    "name",
    "generic_name",
    "dosage",
    "form",
    "manufacturer",
    "batch_number",
    "expiry_date",
    "quantity",
    "min_stock_level",
    "unit_price",
    "supplier_name",
)


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_header(value):
    if value is None:
        return ""
    value_text = str(value).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/"):
        value_text = value_text.replace(char, "_")
    value_text = "_".join(part for part in value_text.split("_") if part)
    alias = HEADER_ALIASES.get(value_text)
    if alias:
        return alias
    alias = HEADER_ALIASES.get(value_text.replace("_", ""))
    if alias:
        return alias
    return value_text


def normalize_sheet_name(name):
    value_text = str(name).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/"):
        value_text = value_text.replace(char, "_")
    return "_".join(part for part in value_text.split("_") if part)


def to_str(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_int(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(f"{field} must be an integer")
    value_text = str(value).strip().replace(",", "")
    try:
        numeric = float(value_text)
    except ValueError:
        raise ValueError(f"{field} must be an integer") from None
    if not numeric.is_integer():
        raise ValueError(f"{field} must be an integer")
    return int(numeric)


def to_decimal(value, field):
    if _is_blank(value):
        return None
    value_text = str(value).strip().replace(",", "")
    try:
        return Decimal(value_text)
    except InvalidOperation:
        raise ValueError(f"{field} must be a number") from None


def to_date(value, field):
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        try:
            return date.fromisoformat(value_text)
        except ValueError:
            pass
        for fmt in ("%Y/%m/%d", "%d/%m/%Y", "%m/%d/%Y"):
            try:
                return datetime.strptime(value_text, fmt).date()
            except ValueError:
                continue
    raise ValueError(f"{field} must be a date (YYYY-MM-DD)")


def load_sheet_rows(worksheet):
    rows_iter = worksheet.iter_rows(values_only=True)
    headers = next(rows_iter, None)
    if not headers:
        return [], set()
    header_keys = [normalize_header(header) for header in headers]
    indices = [(idx, key) for idx, key in enumerate(header_keys) if key in _FIELD_COLUMNS]
    columns = {key for _, key in indices}

    rows = []
    for row_number, row in enumerate(rows_iter, start=2):
        if row is None or all(_is_blank(value) for value in row):
            continue
        record = {key: row[idx] if idx < len(row) else None for idx, key in indices}
        record["_row"] = row_number
        rows.append(record)
    return rows, columns


def validate_columns(columns):
    missing = sorted(REQUIRED_COLUMNS - set(columns))
    if missing:
        missing_text = ", ".join(missing)
        raise ValueError(f"{MEDICATIONS_SHEET} sheet missing columns: {missing_text}")


def parse_medication_row(row):
    row_label = "row {}".format(row.get("_row", "?"))
    try:
        quantity = to_int(row.get("quantity"), "quantity")
        if quantity < 0:
            raise ValueError("quantity cannot be negative")
        if quantity > MAX_STOCK_QUANTITY:
            raise ValueError(f"quantity cannot exceed {MAX_STOCK_QUANTITY}")
        min_stock_level = to_int(row.get("min_stock_level"), "min_stock_level", required=False)
        if min_stock_level is not None and min_stock_level < 0:
            raise ValueError("min_stock_level cannot be negative")
        unit_price = to_decimal(row.get("unit_price"), "unit_price")
        if unit_price is not None and unit_price < 0:
            raise ValueError("unit_price cannot be negative")
        return {
            "name": to_str(row.get("name"), "name"),
            "generic_name": to_str(row.get("generic_name"), "generic_name", required=False),
            "dosage": to_str(row.get("dosage"), "dosage", required=False),
            "form": to_str(row.get("form"), "form", required=False),
            "manufacturer": to_str(row.get("manufacturer"), "manufacturer", required=False),
            "batch_number": to_str(row.get("batch_number"), "batch_number", required=False),
            "expiry_date": to_date(row.get("expiry_date"), "expiry_date"),
            "quantity": quantity,
            "min_stock_level": min_stock_level,
            "unit_price": unit_price,
            "supplier_name": to_str(row.get("supplier_name"), "supplier_name", required=False),
        }
    except ValueError as exc:
        raise ValueError(f"{row_label}: {exc}") from exc


def resolve_supplier(db, supplier_name, cache):
    if not supplier_name:
        return None
    key = supplier_name.strip().lower()
    if key in cache:
        return cache[key]
    supplier = find_supplier_by_name(db, supplier_name)
    if supplier is None:
        supplier = MedicationSupplier(name=supplier_name)
        db.add(supplier)
        db.flush()
    cache[key] = supplier.id
    return supplier.id


def find_medication(db, name, batch_number):
    batch_filter = (
        Medication.batch_number.is_(None)
        if batch_number is None
        else Medication.batch_number == batch_number
    )
    return (
        db.execute(select(Medication).where(Medication.name == name, batch_filter))
        .scalars()
        .first()
    )


def import_medication_row(db, values, supplier_cache, adjustments):
    supplier_id = resolve_supplier(db, values.pop("supplier_name"), supplier_cache)
    quantity = values.pop("quantity")
    medication = find_medication(db, values["name"], values["batch_number"])

    if medication is None:
        payload = MedicationCreate(
            **{key: value for key, value in values.items() if value is not None},
            quantity=quantity,
            supplier_id=supplier_id,
        )
        add_medication(db, payload)
        return "inserted"

    for key, value in values.items():
        if value is not None:
            setattr(medication, key, value)
    if supplier_id is not None:
        medication.supplier_id = supplier_id
    if not medication.is_active:
        medication.is_active = True
    db.flush()

    if medication.quantity != quantity:
        outcome = record_adjustment(db, medication.id, ADJUST_SET, quantity, reason=STOCK_TAKE_REASON)
        adjustments.append(
            {
                "medication_id": medication.id,
                "name": medication.name,
                "old_quantity": outcome.previous_quantity,
                "new_quantity": outcome.new_quantity,
            }
        )
    return "updated"


def import_rows(db, rows):
    counts = {"inserted": 0, "updated": 0, "skipped": 0, "adjustments": []}
    supplier_cache = {}
    for row in rows:
        if _is_blank(row.get("name")):
            counts["skipped"] += 1
            continue
        values = parse_medication_row(row)
        action = import_medication_row(db, values, supplier_cache, counts["adjustments"])
        counts[action] += 1
    return counts


def _pick_sheet(workbook, sheet):
    sheet_map = {normalize_sheet_name(name): name for name in workbook.sheetnames}
    if sheet:
        actual_name = sheet_map.get(normalize_sheet_name(sheet))
        if not actual_name:
            raise ValueError(f"Sheet not found: {sheet}")
        return actual_name
    if MEDICATIONS_SHEET in sheet_map:
        return sheet_map[MEDICATIONS_SHEET]
    if len(sheet_map) == 1:
        return next(iter(sheet_map.values()))
    raise ValueError("No medications sheet found to import.")


def import_workbook(workbook_path, sheet=None, dry_run=False, db=None):
    """Register medications and take stock from an .xlsx workbook.

    New rows become medications with an opening stock entry; rows matching
    an existing medication by name and batch update its details and, when
    the counted quantity differs, record a ``set`` adjustment. The whole
    workbook is one transaction; ``dry_run`` rolls it back.
    """
    workbook_path = Path(workbook_path)
    if not workbook_path.exists():
        raise FileNotFoundError(f"File not found: {workbook_path}")
    if workbook_path.suffix.lower() != ".xlsx":
        raise ValueError("Only .xlsx files are supported.")

    workbook = load_workbook(workbook_path, data_only=True)
    worksheet = workbook[_pick_sheet(workbook, sheet)]
    rows, columns = load_sheet_rows(worksheet)
    validate_columns(columns)

    owns_session = db is None
    if owns_session:
        import_all_models()
        Base.metadata.create_all(bind=engine)
        ensure_sqlite_schema()
        db = SessionLocal()
    try:
        results = import_rows(db, rows)
        if dry_run:
            db.rollback()
        else:
            db.commit()
    except (ValueError, StockControlError, SQLAlchemyError):
        db.rollback()
        raise
    finally:
        if owns_session:
            db.close()

    logger.info(
        "Imported %s: %s inserted, %s updated, %s skipped%s",
        workbook_path.name,
        results["inserted"],
        results["updated"],
        results["skipped"],
        " (dry run)" if dry_run else "",
    )
    return results


def summarize_results(results):
    return "{} inserted, {} updated, {} skipped, {} stock corrections".format(
        results["inserted"],
        results["updated"],
        results["skipped"],
        len(results["adjustments"]),
    )


__all__ = [
    "import_workbook",
    "load_sheet_rows",
    "normalize_header",
    "parse_medication_row",
    "summarize_results",
    "validate_columns",
]
