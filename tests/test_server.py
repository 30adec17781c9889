import io
import random
import socket
import threading
import time

import pytest

from poes.backup import ScoreBackup
from poes.client import run_session
from poes.protocol import C_RESET, Question, StudentSession
from poes.server import (
    QUESTION_BANK,
    ExamServer,
    banner,
    clean_answer,
    final_message,
    question_message,
    shuffled_order,
)


class _ZeroRandom(random.Random):
    """A generator whose every draw is the lowest possible value."""

    def getrandbits(self, k):
        return 0

    def random(self):
        return 0.0


@pytest.fixture
def backup(tmp_path):
    with ScoreBackup(tmp_path / "scores.dat", 10) as store:
        yield store


def _play(sock, answers):
    """Answer every prompt using the answers keyed by question text."""
    pending = ""
    while True:
        data = sock.recv(4096)
        if not data:
            return pending
        pending += data.decode("utf-8")
        if "EXAM COMPLETE" in pending:
            return pending
        if "Your Answer:" in pending:
            reply = next(ans for text, ans in answers.items() if text in pending)
            sock.sendall(reply.encode("utf-8") + b"\n")
            pending = ""


def test_shuffled_order_is_a_permutation():
    order = shuffled_order(10, random.Random(3))
    assert sorted(order) == list(range(10))


def test_shuffled_order_with_zero_draws_rotates():
    assert shuffled_order(10, _ZeroRandom()) == [1, 2, 3, 4, 5, 6, 7, 8, 9, 0]


def test_shuffled_order_of_nothing_is_empty():
    assert shuffled_order(0, random.Random(1)) == []


def test_question_message_layout():
    message = question_message(3, 10, QUESTION_BANK[0])
    assert "Question 3 of 10:" in message
    assert QUESTION_BANK[0].text in message
    assert message.endswith("Your Answer: " + C_RESET)


def test_final_message_shows_score():
    assert "EXAM COMPLETE! Your final score is: 7/10" in final_message(7, 10)


@pytest.mark.parametrize(
    "raw, expected",
    [(b"ls\n", "ls"), (b"cd\nmore", "cd"), (b"fork", "fork"), (b"pwd\0junk", "pwd")],
)
def test_clean_answer(raw, expected):
    assert clean_answer(raw) == expected


def test_banner_mentions_system():
    assert "Starting Parallel Online Exam System..." in banner()


def test_question_bank_entry_in_message():
    question = next(q for q in QUESTION_BANK if q.question_id == 3)
    message = question_message(1, len(QUESTION_BANK), question)
    assert "What system call creates a new process?" in message
    assert "Question 1 of 10:" in message
    assert question.expected_answer == "fork"


def test_record_score_wraps_around_slots(tmp_path):
    with ScoreBackup(tmp_path / "s.dat", 2) as store:
        server = ExamServer(store, "127.0.0.1", 0)
        try:
            slots = [server.record_score(s) for s in (4, 5, 6)]
        finally:
            server.close()
        assert slots == [0, 1, 0]
        assert store.sessions() == [StudentSession("Student_0", 6), StudentSession("Student_1", 5)]


def test_handle_client_full_marks(backup):
    server = ExamServer(backup, "127.0.0.1", 0)
    ours, theirs = socket.socketpair()
    result = {}
    worker = threading.Thread(target=lambda: result.setdefault("score", server.handle_client(theirs)))
    worker.start()
    try:
        transcript = _play(ours, {q.text: q.expected_answer for q in QUESTION_BANK})
    finally:
        worker.join(5)
        ours.close()
        server.close()
    assert result["score"] == 10
    assert "10/10" in transcript
    assert backup.sessions()[0] == StudentSession("Student_0", 10)


def test_handle_client_wrong_answers(backup):
    server = ExamServer(backup, "127.0.0.1", 0)
    ours, theirs = socket.socketpair()
    result = {}
    worker = threading.Thread(target=lambda: result.setdefault("score", server.handle_client(theirs)))
    worker.start()
    try:
        _play(ours, {q.text: "nope" for q in QUESTION_BANK})
    finally:
        worker.join(5)
        ours.close()
        server.close()
    assert result["score"] == 0
    assert server.finished == 1


def test_handle_client_peer_gone_records_zero(backup):
    server = ExamServer(backup, "127.0.0.1", 0)
    ours, theirs = socket.socketpair()
    ours.close()
    try:
        score = server.handle_client(theirs)
    finally:
        server.close()
    assert score == 0
    assert backup.sessions()[0] == StudentSession("Student_0", 0)


def test_serve_forever_end_to_end(backup):
    question = Question(1, "Which command lists files?", "ls")
    server = ExamServer(backup, "127.0.0.1", 0, questions=[question])
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    out = io.StringIO()
    try:
        with socket.create_connection(server.address, timeout=5) as sock:
            complete = run_session(sock, io.StringIO("ls\n"), out)
        deadline = time.monotonic() + 5
        while backup.sessions()[0].student_id == "" and time.monotonic() < deadline:
            time.sleep(0.01)
    finally:
        server.close()
    assert complete is True
    assert "Your final score is: 1/1" in out.getvalue()
    assert backup.sessions()[0] == StudentSession("Student_0", 1)


def test_bind_conflict_raises(backup):
    first = ExamServer(backup, "127.0.0.1", 0)
    try:
        blocker = socket.socket()
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        try:
            with pytest.raises(OSError):
                ExamServer(backup, "127.0.0.1", blocker.getsockname()[1])
        finally:
            blocker.close()
    finally:
        first.close()