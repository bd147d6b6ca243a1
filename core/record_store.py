# core/record_store.py
"""
JSON-backed record store for expenses, incomes, debts, bank balances
and investments.

One document on disk, one handle in memory:

    store = open_store()            # explicit setup, no hidden first-call init
    store.add("expenses", {...})
    snapshot = store.snapshot()     # typed, immutable, ready for the engine
"""

import json
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core import config
from core.models import RECORD_TYPES, UPDATABLE, Snapshot

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# ==================================================
# INTERNAL HELPERS
# ==================================================
def _safe_default() -> Dict[str, List[Record]]:
    return {kind: [] for kind in RECORD_TYPES}


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S_%f")


def _check_kind(kind: str) -> None:
    if kind not in RECORD_TYPES:
        raise KeyError(f"unknown record kind {kind!r}")


class RecordStore:
    def __init__(self, data_file: Path, backup_dir: Path, max_backups: int = config.MAX_BACKUPS):
        self.data_file = Path(data_file)
        self.backup_dir = Path(backup_dir)
        if max_backups < 1:
            raise ValueError(f"max_backups must be at least 1, got {max_backups}")
        self.max_backups = max_backups

    # ==================================================
    # FILE HANDLING
    # ==================================================
    def _ensure_dirs(self) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def _atomic_write(self, data: Dict[str, Any]) -> None:
        tmp = self.data_file.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2, default=str)
        tmp.replace(self.data_file)

    def _create_backup(self, tag: str = "auto") -> None:
        if not self.data_file.exists():
            return

        name = f"finance_{_timestamp()}_{tag}.json"
        shutil.copy2(self.data_file, self.backup_dir / name)

        backups = sorted(self.backup_dir.glob("finance_*.json"))
        for old in backups[:len(backups) - self.max_backups]:
            old.unlink(missing_ok=True)

    def initialize(self) -> "RecordStore":
        self._ensure_dirs()
        if not self.data_file.exists():
            self._atomic_write(_safe_default())
            logger.info("created empty record store at %s", self.data_file)
        return self

    # ==================================================
    # LOAD / SAVE
    # ==================================================
    def load(self) -> Dict[str, List[Record]]:
        self.initialize()

        try:
            with open(self.data_file, "r") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("record store root must be an object")
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("corrupt record store %s (%s), resetting", self.data_file, e)
            self._create_backup(tag="corrupt")
            data = _safe_default()
            self._atomic_write(data)

        for kind in RECORD_TYPES:
            if not isinstance(data.get(kind), list):
                data[kind] = []
        return data

    def save(self, data: Dict[str, List[Record]], tag: str = "auto") -> None:
        self._ensure_dirs()
        self._create_backup(tag=tag)
        self._atomic_write(data)

    # ==================================================
    # CRUD
    # ==================================================
    def list(self, kind: str) -> List[Record]:
        _check_kind(kind)
        return self.load()[kind]

    def add(self, kind: str, record: Record) -> Record:
        """
        Validates through the record type, assigns an id if missing,
        returns the stored dict.
        """
        _check_kind(kind)
        stored = RECORD_TYPES[kind].from_dict(record).to_dict()

        data = self.load()
        if any(r.get("id") == stored["id"] for r in data[kind]):
            raise ValueError(f"{kind} already has a record with id {stored['id']}")

        data[kind].append(stored)
        self.save(data, tag=f"add_{kind}")
        logger.debug("added %s %s", kind, stored["id"])
        return stored

    def update(self, kind: str, record: Record) -> Record:
        """
        Full replace by id.
        """
        _check_kind(kind)
        if kind not in UPDATABLE:
            raise ValueError(f"{kind} records cannot be updated, only added or deleted")
        if not record.get("id"):
            raise KeyError(f"{kind} update needs an id")

        stored = RECORD_TYPES[kind].from_dict(record).to_dict()

        data = self.load()
        for i, existing in enumerate(data[kind]):
            if existing.get("id") == stored["id"]:
                data[kind][i] = stored
                self.save(data, tag=f"update_{kind}")
                logger.debug("updated %s %s", kind, stored["id"])
                return stored

        raise KeyError(f"no {kind} record with id {stored['id']}")

    def delete(self, kind: str, record_id: str) -> bool:
        _check_kind(kind)
        data = self.load()
        before = len(data[kind])

        data[kind] = [r for r in data[kind] if r.get("id") != record_id]

        if len(data[kind]) != before:
            self.save(data, tag=f"delete_{kind}")
            logger.debug("deleted %s %s", kind, record_id)
            return True

        return False

    # ==================================================
    # ENGINE VIEW
    # ==================================================
    def snapshot(self) -> Snapshot:
        data = self.load()
        return Snapshot(**{
            kind: tuple(cls.from_dict(r) for r in data[kind])
            for kind, cls in RECORD_TYPES.items()
        })

    # ==================================================
    # BACKUP MANAGEMENT
    # ==================================================
    def list_backups(self) -> List[Path]:
        self._ensure_dirs()
        return sorted(self.backup_dir.glob("finance_*.json"), reverse=True)

    def restore_backup(self, backup_path: Path) -> None:
        self._ensure_dirs()
        backup_path = Path(backup_path)
        if not backup_path.exists():
            raise FileNotFoundError("Backup file not found")

        self._create_backup(tag="before_restore")
        shutil.copy2(backup_path, self.data_file)
        logger.info("restored record store from %s", backup_path)


def open_store(data_dir: Optional[Union[str, Path]] = None, max_backups: Optional[int] = None) -> RecordStore:
    data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR
    store = RecordStore(
        data_file=data_dir / "finance.json",
        backup_dir=data_dir / "backups",
        max_backups=config.MAX_BACKUPS if max_backups is None else max_backups,
    )
    return store.initialize()
