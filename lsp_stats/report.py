"""Plain text report for lsp-stats."""

from datetime import datetime
from typing import Iterable, List

from .stats import LspStats, RoutingStats

STARS = "*" * 57
RULE = "-" * 57

TOTALS_HEADER = (
    "count,amount_msat,fee_msat,"
    "count_excluding_opens,amount_msat_excluding_opens,fee_msat_excluding_opens"
)
ROUTING_HEADER = "count,amount_msat,fee_msat"

TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z %Z"


def render_banner(month: str, start: datetime, end: datetime) -> str:
    """Run preamble: the window, a freshness reminder and the report title."""
    lines = [
        f"start: {start.strftime(TIME_FORMAT)}",
        f"end:   {end.strftime(TIME_FORMAT)}",
        "DID YOU MAKE SURE THE CHANNELS AND FORWARDS ARE UP-TO-DATE?",
        "",
        "",
        STARS,
        f"*****************  Report for {month}   *****************",
        STARS,
        "",
        "",
    ]
    return "\n".join(lines) + "\n"


def _csv(*values: int) -> str:
    return ",".join(str(v) for v in values)


def render_node_stats(node_name: str, totals: LspStats, routing: RoutingStats,
                      routing_peer_names: Iterable[str]) -> str:
    lines: List[str] = [
        STARS,
        f"LSP node stats - {node_name}",
        RULE,
        "Totals all routing",
        "Includes all forwards, but fees for probable channel opens are excluded.",
        TOTALS_HEADER,
        _csv(totals.count, totals.amount_msat, totals.fee_msat,
             totals.count_excluding_opens, totals.amount_msat_excluding_opens,
             totals.fee_msat_excluding_opens),
        RULE,
        f"Routing to/from only routing nodes '{', '.join(routing_peer_names)}'",
        ROUTING_HEADER,
        _csv(routing.count, routing.amount_msat, routing.fee_msat),
        RULE,
        STARS,
    ]
    return "\n".join(lines) + "\n"
