"""Display formatters for metric values, keyed by metric category."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, Mapping, Optional, Union
import logging
import numbers

import numpy as np

from healthmetrics.config import FormatterConfig
from healthmetrics.errors import UnknownCategoryError
from healthmetrics.series import MetricCategory, Number

logger = logging.getLogger(__name__)

Formatter = Callable[[Optional[Number]], str]


def _is_missing(value) -> bool:
    """True for values that have not been collected (None or NaN)."""
    if value is None:
        return True

    if isinstance(value, bool) or not isinstance(value, (numbers.Real, np.number)):
        raise TypeError(f"Expected a number or None, got {type(value).__name__}: {value!r}")

    # Integers of any size are never NaN
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    return False


def _is_integral(value: Number) -> bool:
    if isinstance(value, numbers.Integral):
        return True
    return float(value).is_integer()


def _format_plain(value: Number) -> str:
    """Render without grouping; integral values drop the fractional part."""
    if _is_integral(value):
        return str(int(value))
    return str(float(value))


def _format_grouped(value: Number) -> str:
    if _is_integral(value):
        return f"{int(value):,}"
    return f"{float(value):,}"


def format_exponential(value: Number) -> str:
    """
    Exponential notation with a single significant digit.

    The mantissa is rounded half-up, so 9999 becomes ``1e+4`` and 2500
    becomes ``3e+3``. The exponent carries an explicit sign and no padding.
    Infinities render as ``inf``/``-inf``.
    """
    number = Decimal(str(value))
    if not number.is_finite():
        return str(float(value))
    if number == 0:
        return "0e+0"

    exponent = number.adjusted()
    mantissa = number.scaleb(-exponent).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if abs(mantissa) == 10:
        mantissa = mantissa / 10
        exponent += 1

    sign = "+" if exponent >= 0 else "-"
    return f"{int(mantissa)}e{sign}{abs(exponent)}"


def request_rate_formatter(config: FormatterConfig) -> Formatter:
    """Requests per second; exponential from the configured threshold up."""
    def format_request_rate(value: Optional[Number]) -> str:
        if _is_missing(value):
            text = config.placeholder
        elif value >= config.exponential_threshold:
            text = format_exponential(value)
        else:
            text = _format_plain(value)
        return f"{text} {config.request_rate_unit}"

    return format_request_rate


def success_rate_formatter(config: FormatterConfig) -> Formatter:
    """Fraction rendered as a percentage with fixed decimals, never clamped."""
    def format_success_rate(value: Optional[Number]) -> str:
        if _is_missing(value):
            return config.placeholder
        if isinstance(value, numbers.Integral):
            percentage = Decimal(int(value)) * 100
        else:
            percentage = float(value) * 100
        return f"{percentage:.{config.success_rate_decimals}f}%"

    return format_success_rate


def latency_formatter(config: FormatterConfig) -> Formatter:
    """Milliseconds; thousands-grouped from the configured threshold up."""
    def format_latency(value: Optional[Number]) -> str:
        if _is_missing(value):
            text = config.placeholder
        elif value >= config.grouping_threshold:
            text = _format_grouped(value)
        else:
            text = _format_plain(value)
        return f"{text} {config.latency_unit}"

    return format_latency


FORMATTER_FACTORIES: Dict[MetricCategory, Callable[[FormatterConfig], Formatter]] = {
    MetricCategory.REQUEST_RATE: request_rate_formatter,
    MetricCategory.SUCCESS_RATE: success_rate_formatter,
    MetricCategory.LATENCY: latency_formatter,
}


def build_formatter_registry(config: Optional[FormatterConfig] = None) -> Dict[MetricCategory, Formatter]:
    """Create one formatter per metric category."""
    config = config or FormatterConfig()
    registry = {
        category: factory(config)
        for category, factory in FORMATTER_FACTORIES.items()
    }
    logger.debug(f"Built formatter registry for {[c.value for c in registry]}")
    return registry


METRIC_TO_FORMATTER: Dict[MetricCategory, Formatter] = build_formatter_registry()


def get_formatter(
    category: Union[MetricCategory, str],
    registry: Optional[Mapping[MetricCategory, Formatter]] = None
) -> Formatter:
    """
    Look up the formatter for a metric category.

    Args:
        category: Enum member or its string value (e.g. "LATENCY")
        registry: Registry to search, the default one when omitted

    Raises:
        UnknownCategoryError: If no formatter exists for the category
    """
    registry = METRIC_TO_FORMATTER if registry is None else registry

    try:
        return registry[MetricCategory(category)]
    except (ValueError, KeyError):
        raise UnknownCategoryError(category) from None


def format_summary(
    values: Mapping[Union[MetricCategory, str], Optional[Number]],
    registry: Optional[Mapping[MetricCategory, Formatter]] = None
) -> Dict[str, str]:
    """
    Format one value per category for a stat pane.

    Every registered category is present in the result; categories with
    no value get their placeholder.
    """
    registry = METRIC_TO_FORMATTER if registry is None else registry

    provided = {}
    for category, value in values.items():
        get_formatter(category, registry)
        provided[MetricCategory(category)] = value

    return {
        category.value: formatter(provided.get(category))
        for category, formatter in registry.items()
    }
