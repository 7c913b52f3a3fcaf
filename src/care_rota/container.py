from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .attendance.factory import AttendanceStrategyFactory
from .attendance.service import AttendanceClassifier
from .common.logging import get_logger
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_ROTA_WINDOW_DAYS
from .daily.buckets import DepartmentBucketizer
from .daily.filters import ShiftFilterPipeline
from .daily.service import DailyRotaService, DailyViewBuilder
from .rota.dataverse_client import DataverseClient, RetryConfig, static_token
from .rota.dataverse_repository import DataverseRotaRepository
from .rota.repository import RotaRepository
from .shifts.classifier import ShiftTypeClassifier
from .stats.calculator.standard_calculator import StandardWorkingHoursCalculator
from .stats.service import StatsAggregator

log = get_logger(__name__)


@dataclass(frozen=True)
class Container:
    repository: RotaRepository

    attendance_classifier: AttendanceClassifier
    shift_type_classifier: ShiftTypeClassifier
    filter_pipeline: ShiftFilterPipeline
    bucketizer: DepartmentBucketizer
    stats_aggregator: StatsAggregator

    daily_view_builder: DailyViewBuilder
    daily_rota_service: DailyRotaService

    local_tz: Optional[tzinfo]


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """IANA zone by name; unknown names are logged and fall back to the timestamp's own offset."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        log.warning("config.unknown_timezone", value=name)
        return None


def build_dataverse_repository(settings: Any) -> DataverseRotaRepository:
    client = DataverseClient(
        str(getattr(settings, "DATAVERSE_URL", "")),
        static_token(str(getattr(settings, "DATAVERSE_TOKEN", ""))),
        retry=RetryConfig(max_retries=int(getattr(settings, "DATAVERSE_MAX_RETRIES", 3))),
    )
    return DataverseRotaRepository(client)


def build_container(*, settings: Any, repository: Optional[RotaRepository] = None) -> Container:
    local_tz = resolve_timezone(getattr(settings, "LOCAL_TIMEZONE", None))
    repository = repository or build_dataverse_repository(settings)

    attendance_classifier = AttendanceClassifier(
        strategy_factory=AttendanceStrategyFactory(),
        grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
    )
    shift_type_classifier = ShiftTypeClassifier(tz=local_tz)
    filter_pipeline = ShiftFilterPipeline(attendance=attendance_classifier, shift_types=shift_type_classifier)
    bucketizer = DepartmentBucketizer()
    stats_aggregator = StatsAggregator(calculator=StandardWorkingHoursCalculator())

    daily_view_builder = DailyViewBuilder(
        classifier=attendance_classifier,
        pipeline=filter_pipeline,
        bucketizer=bucketizer,
        aggregator=stats_aggregator,
    )
    daily_rota_service = DailyRotaService(
        repository,
        builder=daily_view_builder,
        window_days=int(getattr(settings, "ROTA_WINDOW_DAYS", DEFAULT_ROTA_WINDOW_DAYS)),
    )

    return Container(
        repository=repository,
        attendance_classifier=attendance_classifier,
        shift_type_classifier=shift_type_classifier,
        filter_pipeline=filter_pipeline,
        bucketizer=bucketizer,
        stats_aggregator=stats_aggregator,
        daily_view_builder=daily_view_builder,
        daily_rota_service=daily_rota_service,
        local_tz=local_tz,
    )
