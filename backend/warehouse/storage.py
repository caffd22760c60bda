import copy
import json
import os
import tempfile
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from .logging_config import get_logger

logger = get_logger(__name__)


class Document(str, Enum):
    POLLY = "polly"
    POLIKARPOVA = "polikarpova"
    TOTAL = "total"
    PALLETS = "pallets"


INVENTORY_DOCUMENTS = (Document.POLLY, Document.POLIKARPOVA, Document.TOTAL)

FILE_NAMES: Dict[Document, str] = {
    Document.POLLY: "inventory_polly.json",
    Document.POLIKARPOVA: "inventory_polikarpova.json",
    Document.TOTAL: "inventory_total.json",
    Document.PALLETS: "pallets.json",
}

DEFAULTS: Dict[Document, Any] = {
    Document.POLLY: [],
    Document.POLIKARPOVA: [],
    Document.TOTAL: [],
    Document.PALLETS: {"occupiedPallets": 0},
}


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Same permissions a plain open() would give a new file.
FILE_MODE = 0o666 & ~_current_umask()


class StorageError(Exception):
    """A document could not be written to disk."""

    def __init__(self, document: Document, path: Path, cause: Exception):
        super().__init__(f"Failed to write {document.value} to {path}: {cause}")
        self.document = document
        self.path = path
        self.cause = cause


class DocumentStore:
    """File-backed store, one pretty-printed JSON file per document.

    Writes go through a temp file in the same directory and are renamed into
    place, with one lock per document, so readers and overlapping writers
    only ever see a complete document. Last write wins.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self._locks = {doc: threading.Lock() for doc in Document}

    def ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, document: Document) -> Path:
        return self.data_dir / FILE_NAMES[document]

    @staticmethod
    def default_for(document: Document) -> Any:
        return copy.deepcopy(DEFAULTS[document])

    def load(self, document: Document) -> Any:
        """Return the document's content, or its default on any failure.

        A missing file is created with the default. A malformed file is left
        as it is.
        """
        path = self.path_for(document)
        default = self.default_for(document)

        if not path.exists():
            try:
                created = self._write(document, default, only_if_missing=True)
            except StorageError:
                logger.exception("Could not create %s with its default value", path)
                return self.default_for(document)
            if created:
                return self.default_for(document)

        try:
            # Bad bytes come back as U+FFFD instead of raising.
            raw = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            logger.exception("Could not read %s", path)
            return default

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.exception("Could not parse data from file: %s", path)
            return default

    def save(self, document: Document, value: Any) -> None:
        self._write(document, value)

    def _write(self, document: Document, value: Any, only_if_missing: bool = False) -> bool:
        path = self.path_for(document)
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(document, path, exc) from exc

        with self._locks[document]:
            # Another request wrote it after the caller's existence check.
            if only_if_missing and path.exists():
                return False

            tmp_name = None
            try:
                self.ensure_data_dir()
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.chmod(tmp_name, FILE_MODE)
                os.replace(tmp_name, path)
                tmp_name = None
            except OSError as exc:
                raise StorageError(document, path, exc) from exc
            finally:
                if tmp_name is not None:
                    try:
                        os.unlink(tmp_name)
                    except OSError:
                        logger.warning("Could not remove temp file %s", tmp_name)

        logger.info("Saved %s to %s", document.value, path)
        return True

    def clear_all(self) -> None:
        for document in INVENTORY_DOCUMENTS:
            self.save(document, [])
        logger.info("Cleared all inventory documents")

    def snapshot(self) -> Dict[str, Any]:
        return {
            "pollyData": self.load(Document.POLLY),
            "polikarpovaData": self.load(Document.POLIKARPOVA),
            "totalData": self.load(Document.TOTAL),
        }
