"""Data structures for raw metric series and chart-ready points."""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, StrictFloat, StrictInt, model_validator

Number = Union[int, float]
# Raw payload numbers are not coerced from strings
RawNumber = Union[StrictInt, StrictFloat]


class MetricCategory(str, Enum):
    """Metric categories displayed on the dashboard."""
    REQUEST_RATE = "REQUEST_RATE"
    SUCCESS_RATE = "SUCCESS_RATE"
    LATENCY = "LATENCY"


class Percentile(str, Enum):
    """Latency percentile keys, in display order."""
    P50 = "P50"
    P95 = "P95"
    P99 = "P99"


class RawDatapoint(BaseModel):
    """One observation moment of a raw metric series.

    Percentile values appear directly on the raw datapoint
    (``{"timestamp": 1, "P50": 3.0, "P99": 9.0}``) and are collected into
    ``percentiles``. Keys that are absent or null are simply not present.
    """
    timestamp: RawNumber
    value: Optional[RawNumber] = None
    percentiles: Dict[Percentile, RawNumber] = Field(default_factory=dict)

    @model_validator(mode='before')
    @classmethod
    def collect_percentiles(cls, data: Any) -> Any:
        """Move top-level percentile keys into the percentiles mapping."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        percentiles = dict(data.pop('percentiles', None) or {})
        for percentile in Percentile:
            if percentile.value in data:
                percentiles[percentile.value] = data.pop(percentile.value)

        data['percentiles'] = {
            key: value for key, value in percentiles.items() if value is not None
        }
        return data

    def percentile(self, key: Union[Percentile, str]) -> Optional[Number]:
        """Value for one percentile, or None when the datapoint lacks it."""
        return self.percentiles.get(Percentile(key))


class RawMetricSeries(BaseModel):
    """One named metric's time history, ordered by time ascending."""
    name: str
    datapoints: List[RawDatapoint] = Field(default_factory=list)


@dataclass(frozen=True)
class FlatPoint:
    """A single chart-ready data point."""
    timestamp: Number
    value: Number
    label: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)
