"""
Delay-coalescing scheduler for UI updates.

A Debouncer turns a burst of triggers into a single delayed call: every new
trigger cancels the pending call and schedules a fresh one. Triggers return a
ScheduledCall handle immediately and never the wrapped function's result.
"""

import threading

from bezierchain.tracer import get_tracer


class ScheduledCall:
    """Handle to one pending invocation. Runs at most once."""

    def __init__(self, func, args, kwargs, delay, on_finish=None):
        self._func = func
        self._args = args
        self._kwargs = kwargs
        self._on_finish = on_finish
        self._lock = threading.Lock()
        self._started = False
        self._cancelled = False
        self._done = threading.Event()
        self._timer = threading.Timer(delay, self.run)
        self._timer.daemon = True

    def start(self):
        self._timer.start()
        return self

    def cancel(self):
        """Stop the call if it has not started. Returns True if it was stopped."""
        self._timer.cancel()
        with self._lock:
            if self._started:
                return False
            self._cancelled = True
            return True

    @property
    def cancelled(self):
        return self._cancelled

    @property
    def done(self):
        return self._done.is_set()

    def wait(self, timeout=None):
        """Block until the call has run; returns False on timeout."""
        return self._done.wait(timeout)

    def run(self):
        """Invoke the function unless already started or cancelled."""
        with self._lock:
            if self._started or self._cancelled:
                return False
            self._started = True

        try:
            self._func(*self._args, **self._kwargs)
        except Exception as e:
            get_tracer().event(f"Scheduled call failed: {type(e).__name__}: {e}", level="ERROR")
            raise
        finally:
            self._done.set()
            if self._on_finish:
                self._on_finish(self)
        return True


class Debouncer:
    """
    Coalesce bursts of calls into one invocation after `delay` seconds.

    The wrapped function never runs before the delay has elapsed since the
    latest trigger. Safe to trigger from several threads.
    """

    def __init__(self, func, delay):
        self.func = func
        self.delay = delay
        self._lock = threading.Lock()
        self._pending = None

    @classmethod
    def from_config(cls, func, config):
        return cls(func, config.scheduler.delay_seconds)

    def trigger(self, *args, **kwargs):
        """Schedule func(*args, **kwargs), superseding any pending call."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            call = ScheduledCall(self.func, args, kwargs, self.delay, self._finished)
            self._pending = call
            call.start()
        return call

    __call__ = trigger

    def _finished(self, call):
        with self._lock:
            if self._pending is call:
                self._pending = None

    @property
    def pending(self):
        with self._lock:
            return self._pending is not None

    def cancel(self):
        """Drop the pending call, if any. Returns True if one was dropped."""
        with self._lock:
            call, self._pending = self._pending, None
        return call.cancel() if call is not None else False

    def flush(self):
        """Run the pending call now on the calling thread. Returns True if it ran."""
        with self._lock:
            call, self._pending = self._pending, None
        if call is None:
            return False
        call._timer.cancel()
        return call.run()
