"""Shared configuration and wire records for the exam server and client."""

from __future__ import annotations

import struct
from dataclasses import dataclass

C_RESET = "\x1b[0m"
C_RED = "\x1b[31m"
C_GREEN = "\x1b[32m"
C_YELLOW = "\x1b[33m"
C_BLUE = "\x1b[34m"
C_CYAN = "\x1b[36m"
C_BOLD = "\x1b[1m"
C_BG_RED = "\x1b[41m\x1b[37;1m"  # red background, bold white text

PORT = 8080
MAX_BUFFER = 1024
NUM_QUESTIONS = 10

STUDENT_ID_SIZE = 50

# char student_id[50]; two bytes of alignment padding; int score.
_SESSION_STRUCT = struct.Struct(f"<{STUDENT_ID_SIZE}s2xi")
SESSION_SIZE = _SESSION_STRUCT.size


@dataclass(frozen=True)
class Question:
    """One exam question and the answer that earns its point."""

    question_id: int
    text: str
    expected_answer: str


@dataclass
class StudentSession:
    """A student's identifier and final score, as stored in the backup file."""

    student_id: str = ""
    score: int = 0

    def pack(self) -> bytes:
        """Encode the session as a fixed-size binary record."""
        encoded = self.student_id.encode("utf-8")
        if len(encoded) >= STUDENT_ID_SIZE:
            raise ValueError(
                f"student id must be shorter than {STUDENT_ID_SIZE} bytes"
            )
        try:
            return _SESSION_STRUCT.pack(encoded, self.score)
        except struct.error as exc:
            raise ValueError(f"score {self.score!r} does not fit a record") from exc

    @classmethod
    def unpack(cls, data: bytes) -> "StudentSession":
        """Decode one fixed-size binary record."""
        if len(data) != SESSION_SIZE:
            raise ValueError(
                f"a session record is {SESSION_SIZE} bytes, got {len(data)}"
            )
        raw_id, score = _SESSION_STRUCT.unpack(data)
        student_id = raw_id.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(student_id, score)