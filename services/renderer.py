"""
Table Rendering

Formats snapshot numbers the way the ru-RU locale does and writes them into a
DisplaySurface: a table body (4 columns: price, volume, total, change) and a
status line, each addressed by a fixed element id.

Formatting rules:
    - RUB amounts: 2 fraction digits        4500000    -> "4 500 000,00"
    - BTC volume: 4 to 8 fraction digits    1.23456789 -> "1,23456789"
    - Groups separated by a no-break space, comma as decimal separator
    - Anything that is not a finite number formats as zero
"""

import html
import math
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from core.schemas import RenderedView, Snapshot
from core.utils.time import local_time_string


TABLE_BODY_ID = "crypto-table-body"
STATUS_ID = "last-update"
TABLE_COLUMNS = 4

GROUP_SEPARATOR = "\u00a0"
DECIMAL_SEPARATOR = ","


# ============================================
# Number Formatting
# ============================================

def _as_number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    # Normalize -0.0 so it never renders with a minus sign
    return float(value) + 0.0


def format_number(value: Any, min_fraction: int, max_fraction: int) -> str:
    """
    Format ``value`` with ru-RU separators and a bounded number of fraction digits.

    Trailing zeros beyond ``min_fraction`` are dropped.

    Example:
        >>> format_number(1234.5, 2, 2)
        '1\\xa0234,50'
    """
    number = _as_number(value)
    text = f"{number:,.{max_fraction}f}"
    int_part, _, frac_part = text.partition(".")
    frac_part = frac_part.rstrip("0").ljust(min_fraction, "0")

    int_part = int_part.replace(",", GROUP_SEPARATOR)
    if not frac_part:
        return int_part
    return f"{int_part}{DECIMAL_SEPARATOR}{frac_part}"


def format_rub(value: Any) -> str:
    """Format a RUB amount with exactly 2 fraction digits."""
    return format_number(value, 2, 2)


def format_btc(value: Any) -> str:
    """Format a BTC volume with 4 to 8 fraction digits."""
    return format_number(value, 4, 8)


def format_change(value: Any) -> str:
    """Format a RUB change, prefixing "+" when it is positive."""
    sign = "+" if _as_number(value) > 0 else ""
    return f"{sign}{format_rub(value)}"


def describe_duration(seconds: int) -> str:
    """
    Human-readable duration in the largest whole unit.

    Example:
        >>> describe_duration(3600), describe_duration(120), describe_duration(45)
        ('1 hour', '2 minutes', '45 seconds')
    """
    for unit_seconds, unit in ((3600, "hour"), (60, "minute"), (1, "second")):
        if seconds >= unit_seconds and seconds % unit_seconds == 0:
            count = seconds // unit_seconds
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return f"{seconds} seconds"


def describe_period(seconds: int) -> str:
    """
    Duration phrased as a repeat period: "minute" for 60, "2 minutes" for 120.
    """
    duration = describe_duration(seconds)
    return duration[2:] if duration.startswith("1 ") else duration


# ============================================
# Display Surface
# ============================================

class DisplaySurface:
    """
    In-memory display holding the HTML/text of each element by id.

    The web app reads it to serve the page; the renderer is its only writer.
    """

    def __init__(self) -> None:
        self._elements: Dict[str, str] = {TABLE_BODY_ID: "", STATUS_ID: ""}

    def set_content(self, element_id: str, content: str) -> None:
        if element_id not in self._elements:
            raise KeyError(f"Unknown display element: {element_id}")
        self._elements[element_id] = content

    def get_content(self, element_id: str) -> str:
        return self._elements[element_id]

    def view(self) -> RenderedView:
        return RenderedView(
            table_body_html=self._elements[TABLE_BODY_ID],
            status_text=self._elements[STATUS_ID],
        )


# ============================================
# Renderer
# ============================================

class TableRenderer:
    """
    Writes loading, snapshot and error states into a DisplaySurface.

    Attributes:
        surface: Target display
        refresh_interval_seconds: Shown in the status line
        rate_cache_ttl_seconds: Shown in the status line
        clock: Returns the moment written as "last update" time
    """

    def __init__(
        self,
        surface: DisplaySurface,
        refresh_interval_seconds: int = 60,
        rate_cache_ttl_seconds: int = 3600,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.surface = surface
        self.refresh_interval_seconds = refresh_interval_seconds
        self.rate_cache_ttl_seconds = rate_cache_ttl_seconds
        self.clock = clock or datetime.now

    def _message_row(self, text: str, style: str = "text-align: center;") -> str:
        return f'<tr><td colspan="{TABLE_COLUMNS}" style="{style}">{text}</td></tr>'

    def show_loading(self) -> None:
        """Replace the table body with the loading placeholder row."""
        self.surface.set_content(TABLE_BODY_ID, self._message_row("Updating data..."))

    def render(self, snapshot: Snapshot) -> None:
        """Write a snapshot row and the "last update" status line."""
        row = (
            "<tr>"
            f"<td>{format_rub(snapshot.market_price_local)} ₽</td>"
            f"<td>{format_btc(snapshot.volume_units)} BTC</td>"
            f"<td>{format_rub(snapshot.total_value_local)} ₽</td>"
            f'<td class="{snapshot.change_sign}">{format_change(snapshot.change_local)} ₽</td>'
            "</tr>"
        )
        self.surface.set_content(TABLE_BODY_ID, row)

        interval = describe_period(self.refresh_interval_seconds)
        ttl = describe_duration(self.rate_cache_ttl_seconds)
        self.surface.set_content(
            STATUS_ID,
            f"Last update: {local_time_string(self.clock())} "
            f"(refreshes every {interval}, USD/RUB rate cached for {ttl})"
        )

    def render_error(self, message: str) -> None:
        """Write a full-width error row and the "update failed" status line."""
        self.surface.set_content(
            TABLE_BODY_ID,
            self._message_row(
                f"Error: {html.escape(message)}",
                style="text-align: center; color: red;",
            ),
        )
        self.surface.set_content(STATUS_ID, f"Update failed: {local_time_string(self.clock())}")
