import sys
import time
import threading
from functools import wraps
from listening_ports.env import verbose, log_level

LOG_LEVELS = {
    'debug': 0,
    'info': 1,
    'warn': 2,
    'error': 3,
    'critical': 4,
}

class debug:
    def __init__(self, name: str):
        self.name = name

    def __call__(self, func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not verbose():
                return func(*args, **kwargs)

            start = time.monotonic()
            result = func(*args, **kwargs)
            end = time.monotonic()
            log(f"{self.name} ({(end - start)*1000:.0f} ms): {_summary(result)}", 'debug')
            return result

        return wrapper

def _summary(result):
    # Free ranges can hold tens of thousands of ports
    if isinstance(result, dict):
        return '{' + ', '.join(f"{key!r}: {_summary(value)}" for key, value in result.items()) + '}'
    if isinstance(result, list) and len(result) > 10:
        return f"{len(result)} ports [{result[0]}..{result[-1]}]"
    return repr(result)

def log(message, level='info'):
    threshold = LOG_LEVELS.get(log_level(), LOG_LEVELS['info'])
    if LOG_LEVELS[level] >= threshold:
        print(f"[{level.upper()}][thread#{threading.get_native_id()}] {message}", file=sys.stderr)
