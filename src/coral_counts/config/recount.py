"""Run parameters for a recount of one site."""

from __future__ import annotations

from dataclasses import dataclass

from coral_counts.domain.recount.writer import DEFAULT_BATCH_SIZE

from .errors import ConfigurationError
from .mongodb import MongoConfig


@dataclass(frozen=True, slots=True)
class RecountConfig:
    tenant_id: str
    site_id: str
    mongo: MongoConfig
    dry_run: bool = False
    disable_watcher: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    strict_statuses: bool = False

    def __post_init__(self) -> None:
        if not self.tenant_id.strip():
            raise ConfigurationError("Tenant id must not be blank")
        if not self.site_id.strip():
            raise ConfigurationError("Site id must not be blank")
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")
