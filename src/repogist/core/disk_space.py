"""
Disk Space Guard

Reads free space on the volume holding temporary storage and answers whether
a given number of bytes fits with headroom for the archive and its extracted
copy to coexist.

Links to documentation:
- shutil.disk_usage: https://docs.python.org/3/library/shutil.html#shutil.disk_usage

Sample input:
    guard = DiskSpaceGuard("/tmp")
    guard.has_enough_space(1024 ** 3)

Expected output:
    True if at least 2 GiB are free on the /tmp volume
"""

import shutil
from pathlib import Path
from typing import Union

from loguru import logger

from repogist.core.constants import FREE_SPACE_FACTOR


class DiskSpaceGuard:
    def __init__(self, path: Union[str, Path], factor: int = FREE_SPACE_FACTOR):
        self.path = Path(path)
        self.factor = factor

    def available_bytes(self) -> int:
        """Free bytes on the guarded volume, or 0 when the query fails."""
        try:
            return shutil.disk_usage(self.path).free
        except OSError as e:
            logger.warning(f"Could not read free space for {self.path}: {e}")
            return 0

    def has_enough_space(self, required_bytes: int) -> bool:
        available = self.available_bytes()
        enough = available >= self.factor * max(required_bytes, 0)
        if not enough:
            logger.warning(
                f"Insufficient disk space on {self.path}: "
                f"{available} bytes free, {self.factor * required_bytes} required"
            )
        return enough
