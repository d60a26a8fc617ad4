"""
Helpers shared by every payment authorization scheme
"""

import time

DEFAULT_VALIDITY_SECONDS = 300


def current_timestamp() -> int:
    """Current Unix time in whole seconds"""
    return int(time.time())
