"""
Plain-text report rendering.

Every renderer is a pure function of its input, so rendering the same data
twice gives byte-identical text. Reports are wrapped in a code block for chat.
"""
from datetime import datetime
from typing import List, Optional, Sequence, Union

from .models import CostBreakdown, DatapointSeries, MatchSet, ResourceStat, SubResourceStat, current_values
from ..core.i18n import DEFAULT_LANGUAGE, comma_number, message


SEPARATOR = '=' * 36
COST_SEPARATOR = '-' * 24


def code_block(lines: Sequence[str]) -> str:
    return '```\n' + '\n'.join(lines) + '\n```'


def render_names_only(match_set: MatchSet) -> str:
    """Names in match order, one per line."""
    return code_block(match_set.names)


def _count_column(stat: Union[ResourceStat, SubResourceStat]) -> str:
    text = comma_number(stat.item_count or 0)
    extra = stat.size_mb
    if extra is None:
        extra = getattr(stat, 'in_flight_count', None)
    if extra is not None:
        text += f" ({comma_number(extra)})"
    return text


def _columns(stat: Union[ResourceStat, SubResourceStat]) -> List[str]:
    columns = [stat.name]
    if stat.status is not None:
        columns.append(stat.status)
    columns.append(_count_column(stat))
    return columns


def render_resource_stats(match_set: MatchSet, header: Sequence[str]) -> str:
    """Detail table with sub-resources indented beneath their parent."""
    lines = ['\t|\t'.join(header), SEPARATOR]
    for stat in match_set.resources:
        lines.append('\t|\t'.join(_columns(stat)))
        for sub in stat.sub_resources:
            lines.append('\t- ' + '\t|\t'.join(_columns(sub)))
    return code_block(lines)


def render_metric_summary(series: DatapointSeries, title: str) -> str:
    """Current value of each metric in fetch order."""
    lines = [title, SEPARATOR]
    for metric_name, value in current_values(series).items():
        lines.append(f"{metric_name}\t:\t{_format_value(value)}")
    return code_block(lines)


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return comma_number(value)
    return f"{value:,.2f}"


def render_cost_report(costs: CostBreakdown, report_date: datetime, language: Optional[str] = None) -> str:
    """Cost breakdown with services sorted by cost, then name."""
    language = language or DEFAULT_LANGUAGE
    lines = [
        message("[AWS Estimate Costs] %s", report_date.strftime('%Y-%m-%d'), language=language),
        f"- Total:\t${costs.total:.2f}",
        COST_SEPARATOR,
    ]
    for name, value in costs.sorted_services():
        lines.append(f"- {name}:\t${value:.2f}")
    lines.append(f"- (Other):\t${costs.other:.2f}")
    return code_block(lines)
