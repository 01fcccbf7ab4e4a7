"""
One-shot call guard.
"""

import threading
from typing import Any, Callable


def once(fn: Callable[..., Any]) -> Callable[..., None]:
    """
    Wrap fn so only the first call goes through.

    Later calls are silently dropped. The guard is thread-safe and scoped
    to the returned wrapper, so build a new one for every scope that needs
    its own "first time".
    """
    lock = threading.Lock()
    done = False

    def wrapper(*args: Any, **kwargs: Any) -> None:
        nonlocal done
        with lock:
            if done:
                return
            done = True
        fn(*args, **kwargs)

    return wrapper
