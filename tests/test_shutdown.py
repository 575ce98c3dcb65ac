"""
Unit tests for the shutdown module.
"""

import os
import select
import signal
import unittest

from notifywatch.shutdown import ShutdownToken, install_signal_handlers


class TestShutdownToken(unittest.TestCase):
    def test_initially_clear(self):
        with ShutdownToken() as token:
            self.assertFalse(token.is_set())
            ready, _, _ = select.select([token], [], [], 0)
            self.assertEqual(ready, [], "Unset token should not be readable")

    def test_set_wakes_select(self):
        with ShutdownToken() as token:
            token.set()
            self.assertTrue(token.is_set())
            ready, _, _ = select.select([token], [], [], 1)
            self.assertEqual(ready, [token])

    def test_set_twice_writes_once(self):
        with ShutdownToken() as token:
            token.set()
            token.set()
            os.set_blocking(token.fileno(), False)
            self.assertEqual(os.read(token.fileno(), 16), b"\0")


class TestSignalHandlers(unittest.TestCase):
    def test_sigint_sets_token_and_handlers_restored(self):
        before = signal.getsignal(signal.SIGINT)
        with ShutdownToken() as token:
            with install_signal_handlers(token, signals=(signal.SIGINT,)):
                self.assertIsNot(signal.getsignal(signal.SIGINT), before)
                os.kill(os.getpid(), signal.SIGINT)
                # The Python-level handler runs at the next bytecode boundary.
                select.select([token], [], [], 1)
                self.assertTrue(token.is_set())
        self.assertIs(signal.getsignal(signal.SIGINT), before)


if __name__ == "__main__":
    unittest.main()
