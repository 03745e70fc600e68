"""
Export and Import of the film inventory as JSON or CSV.

Exports carry every ledger row plus summary counts. Imports are two-step:
``preview`` parses and validates without touching the ledger, and ``commit``
feeds the previewed rows through reconciliation in one transaction.
"""
import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union
import logging

from pydantic import ValidationError as PydanticValidationError

from filmstock.domain.FilmUnit import FilmType, FilmUnit, parse_timestamp
from filmstock.domain.Ledger import FilmLedger
from filmstock.domain.errors import FilmStockError, ImportFormatError
from filmstock.logic.reconciliation.engine import ReconcileResult, Reconciler
from filmstock.logic.reporting.statistics import InventoryStatistics
from filmstock.utilities import config
from filmstock.utilities.constants import CSV_COLUMNS, CSV_INVENTORY_MARKER, CSV_SUMMARY_MARKER
from filmstock.utilities.validators import ImportedFilm

logger = logging.getLogger(__name__)

# CSV header (lowercased) -> interchange key
_CSV_KEYS = {
    "manufacturer": "manufacturer",
    "film": "name",
    "name": "name",
    "type": "type",
    "iso": "iso",
    "speed": "iso",
    "format": "format",
    "custom format": "customFormat",
    "qty": "quantity",
    "quantity": "quantity",
    "expiry": "expiryDates",
    "frozen": "isFrozen",
    "exposures": "exposures",
    "comments": "comments",
    "added": "addedAt",
}


def _export_record(unit: FilmUnit) -> Dict:
    return {
        "manufacturer": unit.manufacturer,
        "name": unit.name,
        "type": unit.type.value,
        "iso": unit.speed,
        "format": unit.format.raw_value,
        "customFormat": unit.format.custom_name,
        "quantity": unit.quantity,
        "expiryDates": list(unit.expiry_dates),
        "isFrozen": unit.is_frozen,
        "exposures": unit.exposures,
        "comments": unit.comments,
        "addedAt": unit.created_at.isoformat() if unit.created_at else None,
    }


class InventoryExporter:
    """Export the ledger as an interchange document."""

    def __init__(self, ledger: FilmLedger, statistics: InventoryStatistics,
                 app_version: str = config.APP_VERSION,
                 clock: Callable[[], datetime] = datetime.now):
        self.ledger = ledger
        self.statistics = statistics
        self.app_version = app_version
        self._clock = clock

    def export_all(self, today: Optional[date] = None) -> Dict:
        """Payload with every row, sorted by manufacturer then name, and the summary counts."""
        units = sorted(self.ledger.all(), key=lambda u: (u.manufacturer.lower(), u.name.lower()))
        payload = {
            "exportedAt": self._clock().isoformat(timespec="seconds"),
            "appVersion": self.app_version,
            "inventory": [_export_record(u) for u in units],
            "summary": self.statistics.summary(today),
        }
        logger.info(f"Built export payload with {len(units)} rows")
        return payload

    def export_json(self, today: Optional[date] = None) -> str:
        return json.dumps(self.export_all(today), indent=2, ensure_ascii=False)

    def export_csv(self, today: Optional[date] = None) -> str:
        """Flat table: an ``# INVENTORY`` section followed by a ``# SUMMARY`` section."""
        payload = self.export_all(today)
        out = io.StringIO()
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow([CSV_INVENTORY_MARKER])
        writer.writerow(CSV_COLUMNS)
        for rec in payload["inventory"]:
            writer.writerow([
                rec["manufacturer"],
                rec["name"],
                rec["type"],
                rec["iso"],
                rec["format"],
                rec["customFormat"] or "",
                rec["quantity"],
                ", ".join(rec["expiryDates"]),
                "Yes" if rec["isFrozen"] else "No",
                rec["exposures"] if rec["exposures"] is not None else "",
                rec["comments"] or "",
                rec["addedAt"] or "",
            ])
        summary = payload["summary"]
        writer.writerow([])
        writer.writerow([CSV_SUMMARY_MARKER])
        writer.writerow(["Metric", "Value"])
        for key in ("total_rolls", "total_sheets", "unique_films", "expired", "frozen", "finished"):
            writer.writerow([key, summary.get(key, 0)])
        return out.getvalue()

    def export_to_file(self, output_path: Optional[Path] = None, fmt: str = "json") -> Path:
        """Write the export next to the working directory (or to ``output_path``)."""
        if fmt not in ("json", "csv"):
            raise ImportFormatError(f"Unsupported export format: {fmt}")
        if output_path is None:
            timestamp = self._clock().strftime("%Y%m%d_%H%M%S")
            output_path = Path(f"filmstock_export_{timestamp}.{fmt}")
        text = self.export_json() if fmt == "json" else self.export_csv()
        try:
            with open(output_path, 'w', encoding='utf-8', newline='') as f:
                f.write(text)
        except OSError as e:
            logger.error(f"Export to {output_path} failed: {e}")
            raise
        logger.info(f"Exported inventory to {output_path}")
        return Path(output_path)


@dataclass(frozen=True)
class ImportWarning:
    row: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass
class ImportPreview:
    rows: List[FilmUnit] = field(default_factory=list)
    warnings: List[ImportWarning] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "rows": [u.to_dict() for u in self.rows],
            "warnings": [str(w) for w in self.warnings],
        }


class InventoryImporter:
    """Import films from an interchange document (JSON or CSV)."""

    def __init__(self, reconciler: Reconciler):
        self.reconciler = reconciler

    # --- Parsing ----------------------------------------------------------
    @staticmethod
    def _decode(data: Union[bytes, str]) -> str:
        if isinstance(data, bytes):
            try:
                return data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ImportFormatError(f"File is not UTF-8 text: {e}") from e
        return data

    @staticmethod
    def _detect_format(text: str, filename: Optional[str]) -> str:
        if filename:
            suffix = Path(filename).suffix.lower().lstrip(".")
            if suffix in ("json", "csv"):
                return suffix
            raise ImportFormatError(f"Unsupported file type: .{suffix}. Use .json or .csv.")
        return "json" if text.lstrip()[:1] in ("{", "[") else "csv"

    @staticmethod
    def _json_records(text: str) -> List:
        try:
            doc = json.loads(text)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Could not decode JSON: {e}") from e
        if isinstance(doc, list):
            return doc
        if isinstance(doc, dict) and isinstance(doc.get("inventory"), list):
            return doc["inventory"]
        raise ImportFormatError("JSON is neither an inventory export nor a list of films.")

    @staticmethod
    def _csv_records(text: str) -> List[Dict]:
        """Rows of the inventory section as interchange dicts.

        The ``# INVENTORY`` marker is optional; reading stops at the next
        ``# `` section.
        """
        has_marker = any(line.strip().startswith(CSV_INVENTORY_MARKER) for line in text.splitlines())
        started = not has_marker
        header: Optional[List[str]] = None
        records: List[Dict] = []
        for row in csv.reader(io.StringIO(text)):
            if not any(cell.strip() for cell in row):
                continue
            first = row[0].strip()
            if first.startswith("# "):
                if first.startswith(CSV_INVENTORY_MARKER):
                    started, header = True, None
                    continue
                if started and header is not None:
                    break
                continue
            if not started:
                continue
            if header is None:
                header = [cell.strip().lower() for cell in row]
                if "film" not in header and "name" not in header:
                    raise ImportFormatError("CSV header has no Film column.")
                continue
            record = {}
            for i, column in enumerate(header):
                key = _CSV_KEYS.get(column)
                if key and i < len(row):
                    record[key] = row[i].strip()
            records.append(record)
        if header is None:
            raise ImportFormatError("No INVENTORY section found in CSV.")
        return records

    def _row_to_unit(self, number: int, raw, warnings: List[ImportWarning]) -> Optional[FilmUnit]:
        if not isinstance(raw, dict):
            warnings.append(ImportWarning(number, "skipped (not a film record)"))
            return None
        record = dict(raw)
        manufacturer = str(record.get("manufacturer") or "").strip()
        name = str(record.get("name") or "").strip()
        if not manufacturer or not name:
            warnings.append(ImportWarning(number, "skipped (missing manufacturer or film name)"))
            return None

        type_text = str(record.get("type") or "").strip()
        try:
            record["type"] = FilmType.parse(type_text) if type_text else FilmType.BW
        except FilmStockError:
            warnings.append(ImportWarning(number, f"unknown type '{type_text}', imported as B&W"))
            record["type"] = FilmType.BW

        frozen = record.get("isFrozen")
        if isinstance(frozen, str):
            record["isFrozen"] = frozen.strip().lower() in ("yes", "y", "true", "1")

        added = record.get("addedAt")
        record["addedAt"] = parse_timestamp(added) if added else None

        try:
            return ImportedFilm.model_validate(record).to_unit()
        except PydanticValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first.get("loc", ()))
            warnings.append(ImportWarning(number, f"skipped ({where}: {first.get('msg')})"))
        except FilmStockError as e:
            warnings.append(ImportWarning(number, f"skipped ({e.message})"))
        return None

    def preview(self, data: Union[bytes, str], filename: Optional[str] = None) -> ImportPreview:
        """Parse and validate a document. Never touches the ledger.

        Raises ImportFormatError when the container itself cannot be read;
        problems with single rows become warnings and the row is dropped.
        """
        text = self._decode(data)
        if not text.strip():
            raise ImportFormatError("File is empty.")
        fmt = self._detect_format(text, filename)
        records = self._json_records(text) if fmt == "json" else self._csv_records(text)

        preview = ImportPreview()
        for number, raw in enumerate(records, start=1):
            unit = self._row_to_unit(number, raw, preview.warnings)
            if unit is not None:
                preview.rows.append(unit)
        for w in preview.warnings:
            logger.warning(f"Import {fmt}: {w}")
        logger.info(f"Import preview ({fmt}): {len(preview.rows)} row(s), {len(preview.warnings)} warning(s)")
        return preview

    def preview_file(self, input_path: Path) -> ImportPreview:
        input_path = Path(input_path)
        try:
            data = input_path.read_bytes()
        except OSError as e:
            logger.error(f"Could not read import file {input_path}: {e}")
            raise
        return self.preview(data, input_path.name)

    def commit(self, rows: List[FilmUnit]) -> List[ReconcileResult]:
        '''Reconciles every previewed row; all of them land or none do.'''
        store = self.reconciler.ledger.store
        with store.transaction():
            results = [self.reconciler.reconcile(unit) for unit in rows]
        merged = sum(1 for r in results if r.merged)
        logger.info(f"Imported {len(results)} row(s): {len(results) - merged} created, {merged} merged")
        return results


__all__ = ["InventoryExporter", "InventoryImporter", "ImportPreview", "ImportWarning"]
