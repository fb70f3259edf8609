"""Record identifiers: 24 lowercase hex chars, creation-second first."""

import itertools
import os
import threading
import time

_PROCESS_TAG = os.urandom(5).hex()
_counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
_lock = threading.Lock()


def new_record_id() -> str:
    """
    Timestamp (8) + process tag (10) + counter (6).
    
    String order is creation order within a process.
    """
    with _lock:
        seq = next(_counter) & 0xFFFFFF
    return f"{int(time.time()):08x}{_PROCESS_TAG}{seq:06x}"
