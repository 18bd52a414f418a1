"""An event loop that polls file descriptors and runs callbacks for the ready ones."""

from __future__ import annotations

import errno
import os
import select
import socket
import sys
import weakref
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple, Union

from .errors import UnixError
from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

MAX_CATEGORIES = 64
_MAX_ITERATIONS = 128


def _always() -> bool:
    return True


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = auto()
    OUT = auto()


class EventResult(Enum):
    """The outcome of one call to EventLoop.wait_next_event."""

    SUCCESS = auto()
    TIMEOUT = auto()
    EXIT = auto()


class _BasicRule:
    def __init__(self, category_id: int, interest: Interest, callback: Callback) -> None:
        self.category_id = category_id
        self.interest = interest
        self.callback = callback
        self.cancel_requested = False


class _FDRule(_BasicRule):
    def __init__(
        self,
        category_id: int,
        interest: Interest,
        callback: Callback,
        fd: FileDescriptor,
        direction: Direction,
        on_cancel: Optional[Callback],
        on_error: Optional[Callback],
    ) -> None:
        super().__init__(category_id, interest, callback)
        self.fd = fd
        self.direction = direction
        self.on_cancel = on_cancel
        self.on_error = on_error

    def service_count(self) -> int:
        """How many times the descriptor has been read or written, by direction."""
        return self.fd.read_count if self.direction is Direction.IN else self.fd.write_count


class RuleHandle:
    """A weak handle through which a rule can be cancelled."""

    def __init__(self, rule: _BasicRule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        """Ask the loop to drop the rule; its cancel callback is not called."""
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


class EventLoop:
    """Waits for events on file descriptors and runs the matching callbacks."""

    def __init__(self) -> None:
        self._categories: List[str] = []
        self._fd_rules: List[_FDRule] = []
        self._non_fd_rules: List[_BasicRule] = []

    def add_category(self, name: str) -> int:
        """Register a named category of rules and return its id."""
        if len(self._categories) >= MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: Union[int, str]) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def _name(self, rule: _BasicRule) -> str:
        return self._categories[rule.category_id]

    def add_rule(
        self,
        category: Union[int, str],
        callback: Callback,
        interest: Optional[Interest] = None,
    ) -> RuleHandle:
        """Add a rule that runs ``callback`` for as long as ``interest`` holds.

        ``category`` is an id from add_category, or a name for a new category.
        """
        category_id = self._category_id(category)
        rule = _BasicRule(category_id, interest or _always, callback)
        self._non_fd_rules.append(rule)
        return RuleHandle(rule)

    def add_fd_rule(
        self,
        category: Union[int, str],
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
        error: Optional[Callback] = None,
    ) -> RuleHandle:
        """Add a rule that runs ``callback`` when ``fd`` is ready in ``direction``.

        ``cancel`` runs when the rule ends on its own (EOF, hangup, close);
        ``error`` runs first if the descriptor reports an error.
        """
        category_id = self._category_id(category)
        rule = _FDRule(
            category_id,
            interest or _always,
            callback,
            fd.duplicate(),
            direction,
            cancel,
            error,
        )
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    def _serve_non_fd_rules(self) -> bool:
        for rule in list(self._non_fd_rules):
            if rule.cancel_requested:
                self._non_fd_rules.remove(rule)
                continue
            iterations = 0
            fired = False
            while rule.interest():
                if iterations >= _MAX_ITERATIONS:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        f"is still interested after {iterations + 1} iterations"
                    )
                iterations += 1
                fired = True
                rule.callback()
            if fired:
                return True
        return False

    def _report_error(self, rule: _FDRule) -> None:
        name = self._name(rule)
        try:
            sock = socket.socket(fileno=rule.fd.fileno())
        except OSError as exc:
            if exc.errno == errno.ENOTSOCK:
                sys.stderr.write(f'error on polled file descriptor for rule "{name}"\n')
                return
            raise UnixError("getsockopt", exc.errno) from exc
        try:
            socket_error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            raise UnixError("getsockopt", exc.errno) from exc
        finally:
            sock.detach()
        if socket_error:
            sys.stderr.write(
                f'error on polled socket for rule "{name}": {os.strerror(socket_error)}\n'
            )

    def _end_rule(self, rule: _FDRule) -> None:
        if rule.on_cancel is not None:
            rule.on_cancel()
        self._fd_rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> EventResult:
        """Serve at most one rule, waiting up to ``timeout_ms`` for a descriptor."""
        if self._serve_non_fd_rules():
            return EventResult.SUCCESS

        polled: List[Tuple[_FDRule, int]] = []
        something_to_poll = False
        for rule in list(self._fd_rules):
            if rule.cancel_requested:
                self._fd_rules.remove(rule)
                continue
            if rule.direction is Direction.IN and rule.fd.eof:
                self._end_rule(rule)
                continue
            if rule.fd.closed:
                self._end_rule(rule)
                continue
            if rule.interest():
                events = select.POLLIN if rule.direction is Direction.IN else select.POLLOUT
                something_to_poll = True
            else:
                events = 0  # still registered, so that errors are seen
            polled.append((rule, events))

        if not something_to_poll:
            return EventResult.EXIT

        wanted = {}
        for rule, events in polled:
            fd_num = rule.fd.fileno()
            wanted[fd_num] = wanted.get(fd_num, 0) | events
        poller = select.poll()
        for fd_num, events in wanted.items():
            poller.register(fd_num, events)
        try:
            results = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno) from exc
        if not results:
            return EventResult.TIMEOUT
        revents_by_fd = dict(results)

        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fileno(), 0)

            if revents & (select.POLLERR | select.POLLNVAL):
                self._report_error(rule)
                if rule.on_error is not None:
                    rule.on_error()
                self._end_rule(rule)
                continue

            ready = bool(revents & events)
            hangup = bool(revents & select.POLLHUP)
            if hangup and ((events and not ready) or rule.direction is Direction.OUT):
                self._end_rule(rule)
                continue

            if ready:
                count_before = rule.service_count()
                rule.callback()
                if (
                    count_before == rule.service_count()
                    and not rule.fd.closed
                    and rule.interest()
                ):
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        "did not read/write fd and is still interested"
                    )
                return EventResult.SUCCESS

        return EventResult.SUCCESS