"""Exam server: serves shuffled questions to each student on its own thread."""

from __future__ import annotations

import argparse
import random
import socket
import threading
import time
from collections.abc import Sequence

from .backup import BACKUP_FILE, MAX_CLIENTS, ScoreBackup
from .protocol import (
    C_BLUE,
    C_BOLD,
    C_CYAN,
    C_GREEN,
    C_RED,
    C_RESET,
    C_YELLOW,
    MAX_BUFFER,
    PORT,
    Question,
)

QUESTION_BANK: tuple[Question, ...] = (
    Question(1, "What is the command to list files in Linux?", "ls"),
    Question(2, "What command changes directories?", "cd"),
    Question(3, "What system call creates a new process?", "fork"),
    Question(4, "What system call replaces the current process image?", "exec"),
    Question(5, "What function maps a file directly into RAM?", "mmap"),
    Question(6, "What lock prevents thread race conditions?", "mutex"),
    Question(7, "Which tool compiles C programs in Linux?", "gcc"),
    Question(8, "What command displays the current working directory?", "pwd"),
    Question(9, "What command creates a new directory?", "mkdir"),
    Question(10, "What system call pauses until a child process finishes?", "wait"),
)

_RULE = "======================================================\n"

WELCOME = (
    f"{C_CYAN}{C_BOLD}\n{_RULE}"
    "      PARALLEL ONLINE EXAMINATION SYSTEM (POES)\n"
    f"{_RULE}{C_RESET}"
    f"{C_YELLOW}Initializing secure session... Let's begin the exam!\n{C_RESET}"
)


def shuffled_order(count, rng):
    """Return the indices ``0..count-1`` in a Fisher-Yates shuffled order."""
    order = list(range(count))
    for i in range(count - 1, 0, -1):
        j = rng.randrange(i + 1)
        order[i], order[j] = order[j], order[i]
    return order


def question_message(number, total, question):
    """Render the prompt that asks one question."""
    return (
        f"{C_BOLD}\n▶ Question {number} of {total}:\n{C_RESET}"
        f"{C_CYAN}{question.text}{C_RESET}\n"
        f"{C_YELLOW}Your Answer: {C_RESET}"
    )


def final_message(score, total):
    """Render the closing message with the student's score."""
    return (
        f"{C_GREEN}{C_BOLD}\n{_RULE}"
        f"      EXAM COMPLETE! Your final score is: {score}/{total}\n"
        f"{_RULE}{C_RESET}"
    )


def clean_answer(raw):
    """Decode a received answer, keeping only the text before the first newline."""
    text = raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    return text.split("\n", 1)[0]


def banner():
    """Return the start-up banner."""
    art = (
        "  ██████╗  ██████╗ ███████╗███████╗ \n"
        "  ██╔══██╗██╔═══██╗██╔════╝██╔════╝ \n"
        "  ██████╔╝██║   ██║█████╗  ███████╗ \n"
        "  ██╔═══╝ ██║   ██║██╔══╝  ╚════██║ \n"
        "  ██║     ╚██████╔╝███████╗███████║ \n"
        "  ╚═╝      ╚═════╝ ╚══════╝╚══════╝ \n"
    )
    return (
        f"{C_CYAN}{C_BOLD}\n{art}{C_RESET}"
        f"{C_YELLOW}  Starting Parallel Online Exam System...\n\n{C_RESET}"
    )


def _log(message: str) -> None:
    print(message, flush=True)


class ExamServer:
    """A listening socket that runs one exam per connection."""

    def __init__(self, backup, host="", port=PORT, questions=QUESTION_BANK):
        self.backup = backup
        self.questions = tuple(questions)
        self.finished = 0
        self._lock = threading.Lock()
        self._closed = False
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((host, port))
            self._sock.listen(MAX_CLIENTS)
        except OSError:
            self._sock.close()
            raise

    @property
    def address(self):
        """The (host, port) the server listens on."""
        return self._sock.getsockname()

    def record_score(self, score):
        """Save a finished student's score in the next slot; return the slot."""
        with self._lock:
            slot = self.finished % self.backup.slots
            self.backup.record(slot, f"Student_{slot}", score)
            self.finished += 1
            return slot

    def handle_client(self, conn):
        """Run one exam over ``conn``, record the score and return it."""
        fd = conn.fileno()
        total = len(self.questions)
        score = 0
        rng = random.Random(time.time() + fd)
        try:
            conn.sendall(WELCOME.encode("utf-8"))
            for number, index in enumerate(shuffled_order(total, rng), start=1):
                question = self.questions[index]
                conn.sendall(question_message(number, total, question).encode("utf-8"))
                raw = conn.recv(MAX_BUFFER)
                if not raw:
                    break
                answer = clean_answer(raw)
                _log(f"{C_YELLOW}[{fd}] [RX]{C_RESET} Received answer: '{answer}'")
                if answer == question.expected_answer:
                    score += 1
        except OSError:
            pass

        try:
            conn.sendall(final_message(score, total).encode("utf-8"))
        except OSError:
            pass

        _log(f"{C_RED}[{fd}] [OS-LOCK]{C_RESET} Requesting Mutex lock for scoreboard...")
        slot = self.record_score(score)
        _log(f"{C_GREEN}[{fd}] [SYNC]{C_RESET} Saved Student_{slot} with score {score}.")
        _log(f"{C_RED}[{fd}] [OS-LOCK]{C_RESET} Mutex lock released.")
        conn.close()
        return score

    def serve_forever(self):
        """Accept connections until closed, each served on a new thread."""
        while not self._closed:
            try:
                conn, _ = self._sock.accept()
            except OSError as exc:
                if self._closed:
                    break
                _log(f"Accept failed: {exc}")
                continue
            _log(
                f"{C_BLUE}\n[+] [CONNECT]{C_RESET} Spawning worker thread for new "
                f"student (Socket ID: {conn.fileno()})"
            )
            worker = threading.Thread(target=self.handle_client, args=(conn,), daemon=True)
            try:
                worker.start()
            except RuntimeError as exc:
                _log(f"Could not create thread: {exc}")
                conn.close()

    def close(self):
        """Stop listening."""
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()


def main(argv=None):
    """Start the exam server."""
    parser = argparse.ArgumentParser(description="Run the online exam server.")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=PORT, help="port to listen on")
    parser.add_argument("--backup", default=BACKUP_FILE, help="score backup file")
    args = parser.parse_args(argv)

    print(banner(), end="", flush=True)
    with ScoreBackup(args.backup, MAX_CLIENTS) as backup:
        _log(f"{C_GREEN}[ OK ]{C_RESET} Memory-Mapped backup file mounted (Fault Tolerance Active)")
        try:
            server = ExamServer(backup, args.host, args.port)
        except OSError as exc:
            _log(f"Bind failed: {exc}")
            return 1
        _log(f"{C_GREEN}[ OK ]{C_RESET} IPC Socket bound successfully to Port {args.port}")
        _log(
            f"{C_GREEN}[ OK ]{C_RESET} POSIX Thread Pool capacity set to "
            f"{MAX_CLIENTS} concurrent clients"
        )
        _log(f"{C_CYAN}{C_BOLD}\n▶ SERVER ACTIVE & LISTENING FOR CONNECTIONS ◀\n{C_RESET}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            server.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())