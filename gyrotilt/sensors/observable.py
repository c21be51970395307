"""
Observable values: a per-axis publish/subscribe channel for tilt output.

An ObservableValue holds the latest value of one quantity and pushes every
change to its subscribers, the way a UI binds to a state holder. Semantics:

    - Conflation: emitting a value equal to the current one notifies nobody.
    - Replay: a new subscriber is called with the current value by default.
    - Re-entrancy: a subscriber may emit from inside its callback. The new
      value is delivered in a fresh round after the current one, and
      subscribers not yet reached in the current round skip the stale value.
    - Callbacks run on the emitting thread, outside the internal lock.
"""

import threading
from typing import Any, Callable, List, Optional

Callback = Callable[[Any], None]


class Subscription:
    """Handle returned by ObservableValue.subscribe()."""

    def __init__(self, owner: "ObservableValue", callback: Callback) -> None:
        self._owner = owner
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Stop receiving values. Idempotent."""
        if self.active:
            self.active = False
            self._owner._remove(self)


class ObservableValue:
    """Latest-value holder with change notification."""

    def __init__(self, initial: Any = 0.0, name: Optional[str] = None) -> None:
        self.name = name
        self._value = initial
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []
        self._version = 0
        self._delivered = 0
        self._dispatching = False

    def __repr__(self) -> str:
        return f"ObservableValue(name={self.name!r}, value={self._value!r})"

    @property
    def value(self) -> Any:
        """Current value."""
        with self._lock:
            return self._value

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, callback: Callback, replay: bool = True) -> Subscription:
        """
        Register a callback for value changes.

        Args:
            callback: Called with each new value.
            replay: If True, call it once immediately with the current value.

        Returns:
            Subscription; call cancel() to unsubscribe.
        """
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
            current = self._value
        if replay:
            callback(current)
        return subscription

    def emit(self, value: Any) -> bool:
        """
        Set a new value and notify subscribers.

        Returns:
            True if the value changed, False if it was conflated.
        """
        with self._lock:
            if value == self._value:
                return False
            self._value = value
            self._version += 1
            if self._dispatching:
                # the running dispatch loop picks this value up
                return True
            self._dispatching = True

        self._dispatch()
        return True

    def _dispatch(self) -> None:
        try:
            self._dispatch_rounds()
        except BaseException:
            with self._lock:
                self._dispatching = False
            raise

    def _dispatch_rounds(self) -> None:
        while True:
            with self._lock:
                if self._delivered == self._version:
                    # cleared together with the version check
                    self._dispatching = False
                    return
                self._delivered = self._version
                round_version = self._version
                current = self._value
                subscriptions = tuple(self._subscriptions)

            for subscription in subscriptions:
                with self._lock:
                    if self._version != round_version:
                        break
                if subscription.active:
                    subscription.callback(current)

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
