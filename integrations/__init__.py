"""
Outbound integrations.
"""

from integrations.remote_file import fetch_bytes

__all__ = [
    "fetch_bytes",
]
