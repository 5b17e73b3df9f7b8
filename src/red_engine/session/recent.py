"""Most-recently-used file list persisted as one path per line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from red_engine.runtime import telemetry

DEFAULT_RECENT_LIMIT = 20


@dataclass(frozen=True, slots=True)
class RecentFile:
    path: Path
    exists: bool
    last_modified: Optional[float] = None


def _describe(path: Path) -> RecentFile:
    try:
        mtime: Optional[float] = path.stat().st_mtime
    except OSError:
        mtime = None
    return RecentFile(path=path, exists=mtime is not None, last_modified=mtime)


class RecentFiles:
    """Recent paths, most recent first, capped at ``limit``.

    The backing file is rewritten after every change. Write failures are
    logged and otherwise ignored so a read-only config directory never
    blocks editing.
    """

    def __init__(self, store: Path, *, limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self.store = store
        self.limit = limit
        self._entries: List[RecentFile] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[RecentFile]:
        return list(self._entries)

    @property
    def paths(self) -> List[Path]:
        return [entry.path for entry in self._entries]

    def load(self) -> List[RecentFile]:
        try:
            content = self.store.read_text(encoding="utf-8")
        except OSError:
            self._entries = []
            return []
        entries: List[RecentFile] = []
        seen = set()
        for line in content.splitlines():
            raw = line.strip()
            if not raw or raw in seen:
                continue
            seen.add(raw)
            entries.append(_describe(Path(raw)))
            if len(entries) >= self.limit:
                break
        self._entries = entries
        return list(entries)

    def add(self, path: Path) -> None:
        resolved = Path(path).expanduser().absolute()
        self._entries = [entry for entry in self._entries if entry.path != resolved]
        self._entries.insert(0, _describe(resolved))
        del self._entries[self.limit :]
        self.save()

    def save(self) -> bool:
        payload = "\n".join(str(entry.path) for entry in self._entries)
        try:
            self.store.parent.mkdir(parents=True, exist_ok=True)
            self.store.write_text(payload, encoding="utf-8")
        except OSError as exc:
            telemetry.record_event(
                "recent.write_failed",
                level="warning",
                data={"store": str(self.store), "error": str(exc)},
            )
            return False
        return True

    def clear(self) -> None:
        self._entries = []
        try:
            self.store.unlink()
        except FileNotFoundError:
            pass


__all__ = ["DEFAULT_RECENT_LIMIT", "RecentFile", "RecentFiles"]
