"""Application configuration assembled from the environment."""

import os
from dataclasses import dataclass, field
from typing import Optional

from ..application.dto.evaluation_request_dto import EvaluationConfigDTO
from ..domain.consensus.value_objects.consensus_settings import ConsensusSettings
from ..domain.quota.value_objects.quota_settings import QuotaSettings
from .monitoring.structured_logging import LogLevel
from .persistence.database import DatabaseConfig


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    json_format: bool = False
    log_file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    propagate: bool = True

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables."""
        return cls(
            level=LogLevel(os.getenv("JURYBOX_LOG_LEVEL", "INFO").upper()),
            json_format=os.getenv("JURYBOX_LOG_JSON", "false").lower() == "true",
            log_file=os.getenv("JURYBOX_LOG_FILE") or None,
            max_bytes=int(os.getenv("JURYBOX_LOG_MAX_BYTES", str(10 * 1024 * 1024))),
            backup_count=int(os.getenv("JURYBOX_LOG_BACKUP_COUNT", "5")),
        )


@dataclass(frozen=True)
class AppConfig:
    """Every tunable of the service, each with its default."""

    consensus: ConsensusSettings = field(default_factory=ConsensusSettings)
    quota: QuotaSettings = field(default_factory=QuotaSettings)
    evaluation: EvaluationConfigDTO = field(default_factory=EvaluationConfigDTO)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    database: Optional[DatabaseConfig] = None  # in-memory quota store when unset

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables.

        The database is only configured when a database URL is present.
        """
        has_database = bool(os.getenv("JURYBOX_DATABASE_URL") or os.getenv("DATABASE_URL"))
        return cls(
            consensus=ConsensusSettings.from_env(),
            quota=QuotaSettings.from_env(),
            evaluation=EvaluationConfigDTO.from_env(),
            logging=LoggingConfig.from_env(),
            database=DatabaseConfig.from_env() if has_database else None,
        )
