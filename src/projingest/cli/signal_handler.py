"""SIGPIPE and SIGINT bookkeeping for the command line.

Handlers only record that a signal arrived. The writer checks the record before
each write and main() turns it into the conventional exit code.
"""

import atexit
import os
import signal
import sys
from threading import Event
from types import FrameType
from typing import Optional


class SignalHandler:
    """Records received signals as events.

    A handler never exits on its own. It sets its event and restores the previous
    handler, so a second Ctrl+C terminates at once. SafeWriter raises
    BrokenPipeError on its next write once either event is set. When run()
    returns, main() asks exit_code() for the status owed to the signal:

    - SIGPIPE (the reader of stdout went away, e.g. `| head`): 141, which is
      128 + 13, the status a shell reports for a process killed by SIGPIPE.
    - SIGINT (Ctrl+C): 130, which is 128 + 2.

    SIGPIPE takes precedence when both arrived.

    Attributes:
        sigpipe_received: Set once the output pipe has been closed by the reader.
        sigint_received: Set once Ctrl+C has been pressed.
        original_sigpipe_handler: Handler restored after the first SIGPIPE.
        original_sigint_handler: Handler restored after the first SIGINT.
    """

    def __init__(self) -> None:
        self.sigpipe_received = Event()
        self.sigint_received = Event()
        self.original_sigpipe_handler = signal.getsignal(signal.SIGPIPE)
        self.original_sigint_handler = signal.getsignal(signal.SIGINT)

    def handle_sigpipe(self, signum: int, frame: Optional[FrameType]) -> None:
        self.sigpipe_received.set()
        signal.signal(signal.SIGPIPE, self.original_sigpipe_handler)

    def handle_sigint(self, signum: int, frame: Optional[FrameType]) -> None:
        """Record SIGINT and restore the original handler, so a second Ctrl+C aborts at once."""
        self.sigint_received.set()
        signal.signal(signal.SIGINT, self.original_sigint_handler)

    @property
    def interrupted(self) -> bool:
        return self.sigpipe_received.is_set() or self.sigint_received.is_set()

    def exit_code(self) -> Optional[int]:
        """Exit code owed to a received signal, if any."""
        if self.sigpipe_received.is_set():
            return 141
        if self.sigint_received.is_set():
            return 130
        return None


# Shared by main() and SafeWriter
signal_handler = SignalHandler()


def setup_signal_handling() -> None:
    """Install the recording handlers for SIGPIPE and SIGINT."""
    signal.signal(signal.SIGPIPE, signal_handler.handle_sigpipe)
    signal.signal(signal.SIGINT, signal_handler.handle_sigint)


def cleanup() -> None:
    """Point stdout at the null device after an interruption.

    Runs at exit, so the interpreter does not complain while flushing a dead pipe.
    """
    if signal_handler.interrupted:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())


atexit.register(cleanup)
