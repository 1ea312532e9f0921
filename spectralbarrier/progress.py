# Copyright (c) 2026 Antonin Sulc
# Licensed under the MIT License. See LICENSE file for details.

"""Progress sinks used by the continuation driver."""

import sys
import time


class TextProgress:
    """Single-line percentage meter on stdout.

    Updates are throttled to one every ``dt`` seconds, except for 100%.
    """

    def __init__(self, dt=1.0, file=None):
        self.dt = dt
        self.file = file if file is not None else sys.stdout
        self.percent = 0
        self._last_print = None

    def report(self, percent):
        percent = int(min(max(percent, 0), 100))
        if percent < self.percent:
            return
        self.percent = percent
        now = time.monotonic()
        if (self._last_print is None or percent == 100
                or now - self._last_print >= self.dt):
            self._last_print = now
            print(f"\rProgress: {percent:3d}%", end="", file=self.file, flush=True)

    def finish(self):
        print(file=self.file, flush=True)


class NullProgress:
    """Discards all progress reports."""

    def report(self, percent):
        pass

    def finish(self):
        pass
