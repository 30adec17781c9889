# poes

A small parallel online examination system for the terminal. It is made of three
commands: an exam server, an exam client and a backup reader.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Commands

### `poes-server`

This command starts the exam server. It prints a banner and then creates or opens
the backup file. After that it listens for TCP connections. Each connection is
handled on its own thread. The student gets a welcome message and then the ten
questions of the built-in bank in a shuffled order. An answer scores a point only
when it matches the expected answer exactly, for example `ls` or `fork`. The text
after the first newline is dropped before the answer is compared.

At the end the server sends the final score. It then saves the score under a lock
in the memory-mapped backup file. The student is named `Student_<slot>`. The file
has ten slots, and they are reused in turn once all are full. If a client hangs up
early, the score it has so far is still saved.

Options:

- `--host`: the address to listen on. The default is all interfaces.
- `--port`: the port to listen on. The default is `8080`.
- `--backup`: the backup file. The default is `scores_backup.dat` in the current
  directory.

### `poes-client`

This command takes the exam. The client first starts a background monitor thread.
Every two seconds the monitor scans the process directory for a process whose
name is `firefox` or `chrome`. If it finds one, it prints a security alert and the
client exits at once.

The client then connects to the server and prints what the server sends. After
each `Your Answer:` prompt it reads one line from standard input and sends that
line to the server. A live countdown is drawn in the top right of the terminal.
After 80 seconds the client prints a time-up message and exits. The server then
saves the score reached so far.

Options:

- `--host`: the server address. The default is `127.0.0.1`.
- `--port`: the server port. The default is `8080`.
- `--proc-root`: the process directory to scan. The default is `/proc`.

### `poes-read-backup`

This command prints every saved score from a backup file, one line per slot that
holds a student ID. If no slot holds one, it prints `No scores recorded yet.` If
the file does not exist, it prints an error and exits with status 1.

Options:

- `--file`: the backup file. The default is `scores_backup.dat`.
- `--slots`: the number of record slots to read. The default is `10`.

## Library use

- `poes.protocol` holds the colour codes, the port and the buffer size. It also
  defines two dataclasses:
  - `Question` holds `question_id`, `text` and `expected_answer`.
  - `StudentSession` holds `student_id` and `score`. Its `pack()` and `unpack()`
    methods convert one fixed-size binary backup record. The record is a 50-byte
    NUL-padded ID, two padding bytes and a little-endian 32-bit score.
- `poes.backup` provides the backup file and its report:
  - `ScoreBackup(path, slots)` maps the backup file into memory and can be used as a
    context manager. `record(slot, student_id, score)` writes one slot, and
    `sessions()` returns every slot.
  - `read_backup(path, slots)` reads the records from the file.
  - `format_report(sessions)` renders the text that `poes-read-backup` prints.
- `poes.server` provides the server and its messages:
  - `ExamServer(backup, host, port, questions)` binds a listening socket. Its members
    are `serve_forever()`, `handle_client(conn)`, `record_score(score)`, `close()`
    and the `address` property.
  - `shuffled_order`, `question_message`, `final_message`, `clean_answer` and `banner`
    build and parse the text that goes over the wire.
  - `QUESTION_BANK` holds the built-in questions.
- `poes.client` provides the client parts:
  - `run_session(sock, input_stream, output)` relays one exam.
  - `ExamTimer` is the countdown and time limit.
  - `find_forbidden_process` and `monitor_processes` scan the process directory.

## What it does not do

- **No student identity.** Students do not log in. Scores are stored as
  `Student_<slot>`, and only the last ten finished exams are kept.
- **No cheat reporting.** When a forbidden process is found, the client prints an
  alert and exits. Nothing is sent to the server about it.
- **Fixed questions from the command line.** The `poes-server` command always uses
  the built-in question bank. Other questions can be used only by passing
  `questions` to `ExamServer` from Python.
- **Linux only for process scanning.** The scan reads `<proc-root>/<pid>/comm`. If the
  directory cannot be read, monitoring stops silently.