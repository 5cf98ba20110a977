"""Conversion of raw metric payloads into flat, chart-ready timeseries."""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
import logging

from pydantic import ValidationError

from healthmetrics.config import FlattenerConfig
from healthmetrics.errors import MalformedMetricError
from healthmetrics.series import FlatPoint, Number, Percentile, RawMetricSeries

logger = logging.getLogger(__name__)

SeriesInput = Union[RawMetricSeries, Mapping[str, Any]]


def parse_series(raw: Union[SeriesInput, Sequence[SeriesInput]]) -> List[RawMetricSeries]:
    """
    Validate a raw metrics payload.

    Args:
        raw: The fetched envelope (``{"metrics": [...]}``), the bare list of
            series, or a single series. Series may already be RawMetricSeries.

    Returns:
        List of validated series, in input order

    Raises:
        MalformedMetricError: If the payload shape is unrecognized or any
            series or datapoint fails validation
    """
    if isinstance(raw, RawMetricSeries):
        raw = [raw]
    elif isinstance(raw, Mapping):
        if "metrics" in raw:
            raw = raw["metrics"] or []
        elif "name" in raw:
            raw = [raw]
        else:
            raise MalformedMetricError(
                f"Expected a metrics envelope or a single series, got keys {sorted(raw)}"
            )

    parsed = []
    for index, item in enumerate(raw):
        if isinstance(item, RawMetricSeries):
            parsed.append(item)
            continue

        try:
            parsed.append(RawMetricSeries.model_validate(item))
        except ValidationError as e:
            raise MalformedMetricError(f"Invalid metric series at index {index}: {e}") from e

    return parsed


def flatten_latency_breakdown(
    series: Union[SeriesInput, Sequence[SeriesInput]],
    config: Optional[FlattenerConfig] = None
) -> Dict[str, List[FlatPoint]]:
    """
    Convert raw metrics to plottable timeseries data, keyed by metric family.

    Latency series are broken down per percentile: for each percentile
    (outer loop, in configured order) and each datapoint (inner loop, in
    time order) that carries it, one point labeled with the percentile is
    emitted. Other families become plain points labeled with the family
    name. Every series of a family is included.

    Args:
        series: Raw payload, see parse_series
        config: Flattener settings, defaults when omitted

    Returns:
        Mapping of family name to flat points; the latency family is
        always present
    """
    config = config or FlattenerConfig()
    result: Dict[str, List[FlatPoint]] = {config.latency_family: []}

    for metric in parse_series(series):
        if metric.name == config.latency_family:
            points = _flatten_percentiles(metric, config.percentiles)
        else:
            points = _flatten_scalar(metric)

        result.setdefault(metric.name, []).extend(points)
        logger.debug(
            f"Flattened {len(metric.datapoints)} datapoints of {metric.name} "
            f"into {len(points)} points"
        )

    return result


def _flatten_percentiles(metric: RawMetricSeries, percentiles: Iterable[Percentile]) -> List[FlatPoint]:
    points = []
    for percentile in percentiles:
        for datapoint in metric.datapoints:
            value = datapoint.percentile(percentile)
            if value is None:
                continue
            points.append(FlatPoint(datapoint.timestamp, value, percentile.value))
    return points


def _flatten_scalar(metric: RawMetricSeries) -> List[FlatPoint]:
    points = []
    for datapoint in metric.datapoints:
        if datapoint.value is None:
            logger.debug(f"Skipping {metric.name} datapoint at {datapoint.timestamp}: no value")
            continue
        points.append(FlatPoint(datapoint.timestamp, datapoint.value, metric.name))
    return points


def group_by_label(points: Iterable[FlatPoint]) -> Dict[str, List[FlatPoint]]:
    """Group flat points by label, keeping first-seen label order."""
    groups: Dict[str, List[FlatPoint]] = {}
    for point in points:
        groups.setdefault(point.label, []).append(point)
    return groups


def latest_value(
    series: SeriesInput,
    percentile: Optional[Union[Percentile, str]] = None
) -> Optional[Number]:
    """
    Most recent value of a series.

    Args:
        series: A single series
        percentile: Read this percentile instead of the scalar value

    Returns:
        The value of the newest datapoint that carries one, or None
    """
    metric = parse_series([series])[0]

    for datapoint in reversed(metric.datapoints):
        if percentile is not None:
            value = datapoint.percentile(percentile)
        else:
            value = datapoint.value
        if value is not None:
            return value

    return None
