from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceOption:
    name: str  # unique key within the catalog
    duration_minutes: int

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("ServiceOption name must not be empty")
        if self.duration_minutes <= 0:
            raise ValueError("ServiceOption duration must be positive")
