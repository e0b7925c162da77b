import functools
import threading


def singleton(func):
    """
    Decorator for a zero-argument factory function.
    Caches the first return value in func._instance
    and always returns that thereafter.

    The first call runs under a lock so concurrent callers never build
    two instances; later calls skip the lock entirely.
    ``reset()`` drops the cached instance (tests only).
    """
    lock = threading.Lock()

    @functools.wraps(func)
    def wrapper():
        if not hasattr(func, "_instance"):
            with lock:
                if not hasattr(func, "_instance"):
                    # First call: create & stash
                    func._instance = func()
        return func._instance

    def reset():
        with lock:
            if hasattr(func, "_instance"):
                del func._instance

    wrapper.reset = reset
    return wrapper
