"""Persistent list of lemmas that future runs should skip."""

import logging
from dataclasses import dataclass
from pathlib import Path

from verb_lexemes.enums import RejectionReason
from verb_lexemes.validate import MIN_LEMMA_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RejectionRecord:
    """A lemma some pipeline stage declined to process, and why."""

    lemma: str
    reason: RejectionReason

    def __str__(self) -> str:
        return f"{self.lemma} ({self.reason})"


def _read_lemmas(path: Path) -> list[str]:
    """Read a lemma-per-line file, dropping blank lines and stray characters."""
    with path.open(encoding="utf-8") as f:
        return [line.strip() for line in f if len(line.strip()) >= MIN_LEMMA_LENGTH]


def _ends_with_newline(path: Path) -> bool:
    """True if appending a line to `path` will not glue it onto the last one."""
    if not path.exists() or path.stat().st_size == 0:
        return True
    with path.open("rb") as f:
        f.seek(-1, 2)
        return f.read(1) == b"\n"


class ExclusionList:
    """Set of rejected lemmas backed by a flat, append-only text file.

    The file holds one lemma per line. It is read once at construction and
    only ever appended to afterwards. With `path=None` the list lives in
    memory only.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._lemmas: set[str] = set()
        if self.path is not None and self.path.exists():
            self._lemmas.update(_read_lemmas(self.path))
            logger.info("Loaded %d excluded lemmas from %s", len(self._lemmas), self.path)

    def __contains__(self, lemma: object) -> bool:
        return lemma in self._lemmas

    def __len__(self) -> int:
        return len(self._lemmas)

    def add(self, record: RejectionRecord) -> bool:
        """Record a rejection. Returns False if the lemma was already excluded.

        Lemmas shorter than MIN_LEMMA_LENGTH are kept in memory only, since
        loading drops them and validation rejects them again anyway.
        """
        if record.lemma in self._lemmas:
            return False
        self._lemmas.add(record.lemma)
        if self.path is not None and len(record.lemma) >= MIN_LEMMA_LENGTH:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = "" if _ends_with_newline(self.path) else "\n"
            with self.path.open("a", encoding="utf-8") as f:
                f.write(prefix + record.lemma + "\n")
        return True
