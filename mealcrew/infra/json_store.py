"""JSON file persistence shared by the repositories.

Each aggregate lives in one JSON file holding a list of records. Writes go to
a temp file in the same directory and are moved into place, and every
read-modify-write runs under a per-file lock. A file that does not parse
reads as empty and is moved aside, never overwritten, by the next write.
"""
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, Type, TypeVar

from mealcrew.infra.paths import data_file
from mealcrew.utilities.clock import utcnow

logger = logging.getLogger(__name__)

_locks: Dict[str, RLock] = {}
_locks_guard = RLock()


def _lock_for(path: Path) -> RLock:
    key = str(path)
    with _locks_guard:
        if key not in _locks:
            _locks[key] = RLock()
        return _locks[key]


class JsonStore:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read(self) -> Tuple[List[dict], bool]:
        """Return (records, unreadable)."""
        if not self.path.exists():
            return [], False
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", self.path, e)
            return [], True
        if not isinstance(data, list):
            logger.error("Expected a list of records in %s, got %s", self.path, type(data).__name__)
            return [], True
        return data, False

    def _set_aside(self) -> Path:
        """Keep an unreadable file next to the store before it gets replaced."""
        backup = self.path.with_name(f"{self.path.stem}.corrupt-{utcnow():%Y%m%dT%H%M%S%f}.json")
        shutil.move(str(self.path), str(backup))
        logger.error("Moved unreadable %s to %s", self.path.name, backup.name)
        return backup

    def load(self) -> List[dict]:
        with self._lock:
            return self._read()[0]

    def save(self, records: List[dict]) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.stem}_", suffix=".json")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                    json.dump(records, tmp, indent=2, ensure_ascii=False)
                shutil.move(tmp_path, self.path)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)

    @contextmanager
    def transaction(self) -> Iterator[List[dict]]:
        """Yield the record list; it is saved when the block exits without error."""
        with self._lock:
            records, unreadable = self._read()
            yield records
            if unreadable:
                self._set_aside()
            self.save(records)


T = TypeVar('T')


class JsonRepository(Generic[T]):
    """id-keyed CRUD over a JsonStore for entities exposing from_dict/to_dict."""

    filename: str = ''
    entity: Type = dict

    def __init__(self, file_path: Optional[Path] = None):
        self.store = JsonStore(Path(file_path) if file_path else data_file(self.filename))

    def all(self) -> List[T]:
        return [self.entity.from_dict(r) for r in self.store.load()]

    def find(self, predicate: Callable[[T], bool]) -> List[T]:
        return [e for e in self.all() if predicate(e)]

    def get(self, entity_id: str) -> Optional[T]:
        for r in self.store.load():
            if r.get('id') == entity_id:
                return self.entity.from_dict(r)
        return None

    def add(self, item: T) -> T:
        with self.store.transaction() as records:
            records.append(item.to_dict())
        return item

    def add_many(self, items: List[T]) -> List[T]:
        with self.store.transaction() as records:
            records.extend(i.to_dict() for i in items)
        return items

    def update(self, item: T) -> T:
        with self.store.transaction() as records:
            for idx, r in enumerate(records):
                if r.get('id') == item.id:
                    records[idx] = item.to_dict()
                    return item
        raise KeyError(item.id)

    def delete(self, entity_id: str) -> bool:
        with self.store.transaction() as records:
            before = len(records)
            records[:] = [r for r in records if r.get('id') != entity_id]
            return len(records) != before

    def delete_where(self, predicate: Callable[[dict], bool]) -> int:
        with self.store.transaction() as records:
            before = len(records)
            records[:] = [r for r in records if not predicate(r)]
            return before - len(records)
