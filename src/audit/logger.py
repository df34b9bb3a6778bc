"""Relay audit trail: JSON Lines, size-rotated, hash-chained."""

from __future__ import annotations

import fcntl
import hashlib
import json
from dataclasses import dataclass
from pathlib import Path

from src.models import AuditEvent


@dataclass
class ChainValidationResult:
    valid: bool
    broken_at_line: int | None = None


def _digest(line: str) -> str:
    return hashlib.sha256(line.encode()).hexdigest()


def validate_audit_chain(log_path: Path) -> ChainValidationResult:
    """Check that every entry's prev_hash matches the line before it.

    The first entry is only anchored by its successor: it either starts
    a chain or continues one from a rotated backup.
    """
    text = log_path.read_text().strip()
    if not text:
        return ChainValidationResult(valid=True)

    lines = text.split("\n")
    for number in range(2, len(lines) + 1):
        prev_hash = json.loads(lines[number - 1]).get("prev_hash")
        if prev_hash != _digest(lines[number - 2]):
            return ChainValidationResult(valid=False, broken_at_line=number)
    return ChainValidationResult(valid=True)


def _rotate(log_path: Path, backup_count: int) -> None:
    """Shift ``log``→``log.1``→…→``log.N``, dropping the oldest backup."""
    backups = [log_path.with_name(f"{log_path.name}.{i}") for i in range(1, backup_count + 1)]
    if backups[-1].exists():
        backups[-1].unlink()
    for older, newer in zip(reversed(backups[:-1]), reversed(backups[1:])):
        if older.exists():
            older.rename(newer)
    log_path.rename(backups[0])


class AuditLogger:
    """Append-only audit log for relay outcomes.

    Each line is one AuditEvent plus ``prev_hash``, the SHA-256 of the
    previously written line. The chain continues across restarts and
    across rotation.
    """

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = max(backup_count, 1)
        self._lock_path = self.log_path.with_name(f".{self.log_path.name}.lock")
        self._last_line: str | None = None
        if self.log_path.exists():
            lines = self.log_path.read_text().strip().split("\n")
            self._last_line = lines[-1] or None

    def _needs_rotation(self) -> bool:
        return self.log_path.exists() and self.log_path.stat().st_size >= self._max_bytes

    def log(self, event: AuditEvent) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        record = json.loads(event.model_dump_json())
        record["prev_hash"] = _digest(self._last_line) if self._last_line is not None else None
        line = json.dumps(record, separators=(",", ":"))

        with open(self._lock_path, "w") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                if self._needs_rotation():
                    _rotate(self.log_path, self._backup_count)
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

        self._last_line = line
