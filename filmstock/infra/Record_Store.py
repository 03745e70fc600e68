"""Record store: table/id keyed CRUD over plain dicts, in memory or in one JSON file.

Tables keep insertion order. ``transaction()`` groups several writes so they
land together or not at all; the JSON store writes its file once, at the end
of the outermost transaction.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)

FILMS = "films"
MANUFACTURERS = "manufacturers"
CAMERAS = "cameras"
LOADED_FILMS = "loaded_films"
FINISHED_FILMS = "finished_films"
TABLES = (FILMS, MANUFACTURERS, CAMERAS, LOADED_FILMS, FINISHED_FILMS)


class RecordNotFound(KeyError):
    def __init__(self, table: str, record_id: str):
        super().__init__(f"{table}/{record_id}")
        self.table = table
        self.record_id = record_id


class RecordStore(Protocol):
    def create(self, table: str, record_id: str, data: dict) -> None: ...
    def read(self, table: str, record_id: str) -> Optional[dict]: ...
    def update(self, table: str, record_id: str, data: dict) -> None: ...
    def delete(self, table: str, record_ids: Iterable[str]) -> None: ...
    def all(self, table: str) -> List[dict]: ...
    def transaction(self): ...


class InMemoryRecordStore:
    def __init__(self, tables: Optional[Dict[str, Dict[str, dict]]] = None):
        self._tables: Dict[str, Dict[str, dict]] = {name: {} for name in TABLES}
        for name, rows in (tables or {}).items():
            self._tables[name] = dict(rows)
        self._depth = 0

    def _table(self, table: str) -> Dict[str, dict]:
        return self._tables.setdefault(table, {})

    def create(self, table: str, record_id: str, data: dict) -> None:
        rows = self._table(table)
        if record_id in rows:
            raise KeyError(f"{table}/{record_id} already exists")
        rows[record_id] = copy.deepcopy(data)
        self._committed()

    def read(self, table: str, record_id: str) -> Optional[dict]:
        row = self._table(table).get(record_id)
        return copy.deepcopy(row) if row is not None else None

    def update(self, table: str, record_id: str, data: dict) -> None:
        rows = self._table(table)
        if record_id not in rows:
            raise RecordNotFound(table, record_id)
        # Plain dict assignment keeps the original insertion position
        rows[record_id] = copy.deepcopy(data)
        self._committed()

    def delete(self, table: str, record_ids: Iterable[str]) -> None:
        rows = self._table(table)
        ids = list(record_ids)
        for record_id in ids:
            if record_id not in rows:
                raise RecordNotFound(table, record_id)
        for record_id in ids:
            del rows[record_id]
        self._committed()

    def all(self, table: str) -> List[dict]:
        return [copy.deepcopy(row) for row in self._table(table).values()]

    def count(self, table: str) -> int:
        return len(self._table(table))

    @contextmanager
    def transaction(self):
        snapshot = copy.deepcopy(self._tables)
        self._depth += 1
        try:
            yield self
        except Exception:
            self._depth -= 1
            self._tables = snapshot
            raise
        self._depth -= 1
        try:
            self._committed()
        except OSError:
            self._tables = snapshot
            raise

    def _committed(self) -> None:
        '''Hook called after each write outside of (or at the end of) a transaction.'''
        if self._depth == 0:
            self._flush()

    def _flush(self) -> None:
        pass

    def snapshot(self) -> Dict[str, List[dict]]:
        return {name: self.all(name) for name in self._tables}


class JsonRecordStore(InMemoryRecordStore):
    """Record store persisted as a single JSON document ``{table: [rows]}``."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, Dict[str, dict]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f) or {}
        except json.JSONDecodeError as e:
            logger.error(f"Inventory file {self.path} is not valid JSON: {e}")
            raise
        tables: Dict[str, Dict[str, dict]] = {}
        for name, rows in raw.items():
            if not isinstance(rows, list):
                logger.warning(f"Ignoring table {name!r}: expected a list")
                continue
            tables[name] = {row["id"]: row for row in rows if isinstance(row, dict) and row.get("id")}
        logger.info(f"Loaded {sum(len(t) for t in tables.values())} records from {self.path}")
        return tables

    def _flush(self) -> None:
        self._atomic_write(self.snapshot())

    def _atomic_write(self, payload: dict) -> None:
        os.makedirs(self.path.parent, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".inventory_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(payload, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)


__all__ = [
    'RecordStore', 'InMemoryRecordStore', 'JsonRecordStore', 'RecordNotFound',
    'FILMS', 'MANUFACTURERS', 'CAMERAS', 'LOADED_FILMS', 'FINISHED_FILMS', 'TABLES',
]
