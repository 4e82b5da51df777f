from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LocationProfile


class LocationRepository(Protocol):
    def list_all(self) -> Sequence[LocationProfile]:
        raise NotImplementedError

    def get_by_id(self, location_id: int) -> Optional[LocationProfile]:
        raise NotImplementedError
