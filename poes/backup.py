"""Memory-mapped score backup and the tool that recovers scores from it."""

from __future__ import annotations

import argparse
import mmap
import os
from collections.abc import Iterable

from .protocol import (
    C_CYAN,
    C_GREEN,
    C_RED,
    C_RESET,
    C_YELLOW,
    SESSION_SIZE,
    StudentSession,
)

MAX_CLIENTS = 10
BACKUP_FILE = "scores_backup.dat"


class ScoreBackup:
    """A file of fixed-size session records mapped into memory."""

    def __init__(self, path=BACKUP_FILE, slots=MAX_CLIENTS):
        if slots < 1:
            raise ValueError("a backup needs at least one slot")
        self.path = os.fspath(path)
        self.slots = slots
        size = slots * SESSION_SIZE
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o666)
        try:
            os.ftruncate(fd, size)
            self._map = mmap.mmap(fd, size)
        finally:
            os.close(fd)

    def _offset(self, slot: int) -> int:
        if not 0 <= slot < self.slots:
            raise IndexError(f"slot {slot} is outside 0..{self.slots - 1}")
        return slot * SESSION_SIZE

    def record(self, slot, student_id, score):
        """Store a student's score in the given slot."""
        offset = self._offset(slot)
        data = StudentSession(student_id, score).pack()
        self._map[offset : offset + SESSION_SIZE] = data
        self._map.flush()

    def sessions(self):
        """Return the records of every slot, empty ones included."""
        return [
            StudentSession.unpack(self._map[start : start + SESSION_SIZE])
            for start in range(0, self.slots * SESSION_SIZE, SESSION_SIZE)
        ]

    def close(self):
        """Unmap the backup file."""
        if not self._map.closed:
            self._map.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def read_backup(path=BACKUP_FILE, slots=MAX_CLIENTS):
    """Read up to ``slots`` complete records from a backup file."""
    with open(path, "rb") as fp:
        data = fp.read(slots * SESSION_SIZE)
    whole = len(data) - len(data) % SESSION_SIZE
    return [
        StudentSession.unpack(data[start : start + SESSION_SIZE])
        for start in range(0, whole, SESSION_SIZE)
    ]


def format_report(sessions: Iterable[StudentSession]) -> str:
    """Render the recovered scores, skipping slots with no student id."""
    rule = "============================================\n"
    lines = [
        f"{C_GREEN}\n{rule}         RECOVERED FAULT-TOLERANT SCORES\n{rule}{C_RESET}"
    ]
    found = False
    for session in sessions:
        if session.student_id:
            lines.append(
                f"{C_YELLOW}ID: {C_RESET}{session.student_id:<15} | "
                f"{C_YELLOW}Score: {C_RESET}{session.score}\n"
            )
            found = True
    if not found:
        lines.append("No scores recorded yet.\n")
    lines.append("\n")
    return "".join(lines)


def main(argv=None):
    """Print the scores saved in a backup file."""
    parser = argparse.ArgumentParser(description="Recover exam scores from a backup.")
    parser.add_argument("--file", default=BACKUP_FILE, help="backup file to read")
    parser.add_argument(
        "--slots", type=int, default=MAX_CLIENTS, help="number of record slots"
    )
    args = parser.parse_args(argv)

    print(
        f"{C_CYAN}\n[Recovery System]{C_RESET} Accessing memory-mapped binary backup..."
    )
    try:
        sessions = read_backup(args.file, args.slots)
    except FileNotFoundError:
        print(
            f"{C_RED}Error: No backup file found. "
            f"Has anyone taken the exam yet?{C_RESET}"
        )
        return 1
    print(format_report(sessions), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())