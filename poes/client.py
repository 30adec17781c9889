"""Exam client with a countdown timer and a forbidden-process monitor."""

from __future__ import annotations

import argparse
import codecs
import os
import socket
import sys
import threading
import time

from .protocol import (
    C_BG_RED,
    C_BOLD,
    C_CYAN,
    C_RED,
    C_RESET,
    MAX_BUFFER,
    PORT,
)

FORBIDDEN = ("firefox", "chrome")
EXAM_SECONDS = 80
SERVER_HOST = "127.0.0.1"


def find_forbidden_process(proc_root="/proc", forbidden=FORBIDDEN):
    """Return the name of a running forbidden process, or None.

    Raises OSError when ``proc_root`` cannot be listed.
    """
    with os.scandir(proc_root) as entries:
        for entry in entries:
            if not entry.name[:1].isdigit():
                continue
            try:
                with open(os.path.join(entry.path, "comm"), encoding="utf-8", errors="replace") as fp:
                    line = fp.readline(255)
            except OSError:
                continue
            name = line.split("\n", 1)[0]
            if name in forbidden:
                return name
    return None


def monitor_processes(proc_root="/proc", interval=2.0, stop_event=None, on_detect=None):
    """Scan for forbidden processes every ``interval`` seconds until stopped.

    Returns the detected process name, or None when stopped or when the
    process directory cannot be read.
    """
    stop = stop_event if stop_event is not None else threading.Event()
    while not stop.is_set():
        try:
            name = find_forbidden_process(proc_root)
        except OSError:
            return None
        if name is not None:
            if on_detect is not None:
                on_detect(name)
            return name
        if stop.wait(interval):
            break
    return None


class ExamTimer:
    """Shows a live countdown and fires ``on_timeout`` when time runs out."""

    startup_delay = 2.0
    tick = 1.0

    def __init__(self, seconds=EXAM_SECONDS, output=None, on_timeout=None):
        self.seconds = seconds
        self.time_left = seconds
        self.output = output if output is not None else sys.stdout
        self.on_timeout = on_timeout if on_timeout is not None else self._time_up
        self._stop = threading.Event()
        self._display: threading.Thread | None = None
        self._alarm: threading.Timer | None = None

    def _time_up(self):
        self.output.write(
            f"\n\n{C_BG_RED} ⌛ TIME IS UP! {self.seconds} SECONDS ELAPSED ⌛ {C_RESET}\n"
            f"{C_RED}{C_BOLD}Your exam has been forcefully submitted by the "
            f"Operating System.\n{C_RESET}"
        )
        self.output.flush()
        os._exit(0)

    def _expire(self):
        if not self._stop.is_set():
            self.on_timeout()

    def _show(self):
        if self._stop.wait(self.startup_delay):
            return
        while self.time_left > 0 and not self._stop.is_set():
            self.output.write(
                f"\033[s\033[2;50H{C_BG_RED}{C_BOLD} ⏳ TIME LEFT: "
                f"{self.time_left:02d} s {C_RESET}\033[u"
            )
            self.output.flush()
            if self._stop.wait(self.tick):
                break
            self.time_left -= 1

    def start(self):
        """Start the countdown display and the timeout alarm."""
        if self._display is not None:
            raise RuntimeError("timer already started")
        self._alarm = threading.Timer(self.seconds * self.tick, self._expire)
        self._alarm.daemon = True
        self._display = threading.Thread(target=self._show, daemon=True)
        self._alarm.start()
        self._display.start()

    def stop(self):
        """Cancel the alarm and stop the display."""
        self._stop.set()
        if self._alarm is not None:
            self._alarm.cancel()
        if self._display is not None and self._display is not threading.current_thread():
            self._display.join()


def run_session(sock, input_stream, output):
    """Relay server messages and student answers.

    Returns True when the exam completed, False when the server hung up.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = sock.recv(MAX_BUFFER - 1)
        if not data:
            output.write(f"{C_RED}\n[Disconnected] Connection closed by server.\n{C_RESET}")
            output.flush()
            return False
        text = decoder.decode(data)
        output.write(text)
        output.flush()
        if "EXAM COMPLETE" in text:
            return True
        if "Your Answer:" in text:
            answer = input_stream.readline()
            if answer:
                sock.sendall(answer.encode("utf-8"))


def _cheat_detected(name):
    print(f"\n\n{C_BG_RED} 🚨 [SECURITY ALERT] CHEAT DETECTED! 🚨 {C_RESET}")
    print(f"{C_RED}{C_BOLD}Illegal application '{name}' is running on your OS!\n{C_RESET}", end="")
    print(f"{C_RED}Terminating exam and reporting to server immediately...\n{C_RESET}", end="", flush=True)
    os._exit(1)


def main(argv=None):
    """Take the exam against a running server."""
    parser = argparse.ArgumentParser(description="Take the online exam.")
    parser.add_argument("--host", default=SERVER_HOST, help="server address")
    parser.add_argument("--port", type=int, default=PORT, help="server port")
    parser.add_argument("--proc-root", default="/proc", help="process directory to scan")
    args = parser.parse_args(argv)

    stop_monitor = threading.Event()
    monitor = threading.Thread(
        target=monitor_processes,
        args=(args.proc_root, 2.0, stop_monitor, _cheat_detected),
        daemon=True,
    )
    monitor.start()

    print(f"{C_CYAN}Initializing OS-Level Security Modules...\n{C_RESET}", end="", flush=True)
    time.sleep(1)
    print(f"{C_CYAN}Establishing secure socket connection to server...\n{C_RESET}", end="", flush=True)
    time.sleep(1)

    timer = ExamTimer(EXAM_SECONDS)
    timer.start()

    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError:
        print("\nConnection Failed! Is the server running?", flush=True)
        timer.stop()
        stop_monitor.set()
        return 1

    with sock:
        run_session(sock, sys.stdin, sys.stdout)

    stop_monitor.set()
    timer.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())