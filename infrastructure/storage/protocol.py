"""FileStorage protocol — agent photos are stored through this."""

from typing import Protocol


class FileStorage(Protocol):
    async def save(self, subdir: str, filename: str, data: bytes) -> str:
        """Persist *data* and return a stable relative reference (``/uploads/...``)."""
        ...

    async def delete(self, reference: str) -> bool:
        """Best-effort removal. Returns False instead of raising on failure."""
        ...
