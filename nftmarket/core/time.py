"""
nftmarket/core/time.py

THE ONLY TIMESTAMP FUNCTION IN NFTMARKET.

Journal wire format: YYYY-MM-DDTHH:MM:SS.mmmZ
                     (milliseconds, explicit Z, no +00:00, no microseconds)
"""

from datetime import datetime, timezone


def journal_timestamp() -> str:
    """
    Return current UTC time in journal wire format.
    Format: YYYY-MM-DDTHH:MM:SS.mmmZ  (exactly 3 fractional digits, Z suffix)
    """
    now = datetime.now(timezone.utc)
    ms  = now.microsecond // 1000
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ms:03d}Z"
