# File: calendar_core/processors/layout_engine.py
"""
Screen-space layout for calendar views.

Two regimes:
    - layout(): row bin-packing on a day or hour grid (month view,
      resource timeline). Multi-unit bars are placed first, single-unit
      items fill the remaining cells.
    - layout_day(): time-axis layout of one day column (day/week view),
      with overlapping events cascaded to the right.
"""

from bisect import bisect_left, bisect_right
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

import pytz

from calendar_core.core.config_manager import Config
from calendar_core.models import (
    GridType,
    LayoutConfig,
    LayoutResult,
    Occurrence,
    PositionedOccurrence,
    VisibleHours,
)
from calendar_core.utils.dates import (
    ONE_MINUTE,
    get_timezone,
    start_of_day,
    start_of_unit,
    to_wall_time,
)
from calendar_core.utils.logger import setup_logger

logger = setup_logger(__name__)

# Total horizontal spread of a cluster, by cluster size
CLUSTER_SPREAD = {2: 25.0, 3: 50.0, 4: 60.0}
MAX_CLUSTER_SPREAD = 70.0


def cluster_spread(size: int) -> float:
    if size < 2:
        return 0.0
    return CLUSTER_SPREAD.get(size, MAX_CLUSTER_SPREAD)


class OccupancyGrid:
    """Rows x columns of taken flags, created for a single layout call."""

    def __init__(self, rows: int, columns: int):
        self.rows = max(0, rows)
        self.columns = columns
        self.cells = [[False] * columns for _ in range(self.rows)]

    def is_free(self, row: int, first: int, last: int) -> bool:
        return not any(self.cells[row][first:last + 1])

    def first_free_row(self, first: int, last: int) -> Optional[int]:
        """Lowest row whose columns first..last are all free."""
        for row in range(self.rows):
            if self.is_free(row, first, last):
                return row
        return None

    def occupy(self, row: int, first: int, last: int):
        for col in range(first, last + 1):
            self.cells[row][col] = True


class EventLayoutEngine:
    """Deterministic layout of occurrences; never mutates its inputs."""

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        timezone: Optional[Union[str, pytz.BaseTzInfo]] = None,
    ):
        self.config = config or Config.layout_config()
        if timezone is None or isinstance(timezone, str):
            self.tz = get_timezone(timezone)
        else:
            self.tz = timezone

    # ==================== Grid layout ====================

    def layout(
        self,
        occurrences: List[Occurrence],
        columns: List[Union[datetime, date]],
        max_rows_per_cell: Optional[int] = None,
        grid_type: GridType = GridType.DAY,
    ) -> LayoutResult:
        """
        Place occurrences on a grid of day or hour columns.

        Args:
            occurrences: Concrete occurrences (already expanded)
            columns: Unit starts of the visible columns, in any order;
                column indices in the result follow time order
            max_rows_per_cell: Bars per cell (default: config.max_rows)
            grid_type: GridType.DAY or GridType.HOUR

        Returns:
            LayoutResult with positioned bars, dropped occurrences and
            per-column hidden counts
        """
        rows = self.config.max_rows if max_rows_per_cell is None else max_rows_per_cell
        units = sorted(start_of_unit(self._wall(column), grid_type) for column in columns)
        result = LayoutResult()
        if not units:
            return result

        grid = OccupancyGrid(rows, len(units))

        multi_unit, single_unit = [], []
        for occurrence in occurrences:
            start, end = self._wall(occurrence.start), self._wall(occurrence.end)
            first_unit = start_of_unit(start, grid_type)
            last_unit = start_of_unit(end - ONE_MINUTE if end > start else end, grid_type)
            if last_unit > first_unit:
                multi_unit.append((start, end - start, first_unit, last_unit, occurrence))
            else:
                single_unit.append((start, first_unit, occurrence))

        # Earlier first, then longer first; sort is stable for exact ties
        multi_unit.sort(key=lambda item: (item[0], -item[1]))
        single_unit.sort(key=lambda item: item[0])

        for _, _, first_unit, last_unit, occurrence in multi_unit:
            self._place_multi_unit(grid, units, first_unit, last_unit, occurrence, result)

        for _, unit, occurrence in single_unit:
            self._place_single_unit(grid, units, unit, occurrence, result)

        if result.dropped:
            logger.debug(f"{len(result.dropped)} occurrences did not fit in {rows} rows")
        return result

    def _place_multi_unit(
        self,
        grid: OccupancyGrid,
        units: List[datetime],
        first_unit: datetime,
        last_unit: datetime,
        occurrence: Occurrence,
        result: LayoutResult,
    ):
        col_start = bisect_left(units, first_unit)
        col_end = bisect_right(units, last_unit) - 1
        if col_start >= len(units) or col_end < 0 or col_start > col_end:
            return

        truncated_start = first_unit < units[col_start]
        truncated_end = last_unit > units[col_end]

        # Right-shift the start until some row has room
        for first in range(col_start, col_end + 1):
            row = grid.first_free_row(first, col_end)
            if row is None:
                continue
            grid.occupy(row, first, col_end)
            result.positioned.append(self._bar(
                occurrence, row, first, col_end, len(units),
                truncated_start=truncated_start or first > col_start,
                truncated_end=truncated_end,
            ))
            return

        result.dropped.append(occurrence)
        for col in range(col_start, col_end + 1):
            result.hidden_counts[col] = result.hidden_counts.get(col, 0) + 1

    def _place_single_unit(
        self,
        grid: OccupancyGrid,
        units: List[datetime],
        unit: datetime,
        occurrence: Occurrence,
        result: LayoutResult,
    ):
        col = bisect_left(units, unit)
        if col >= len(units) or units[col] != unit:
            return

        row = grid.first_free_row(col, col)
        if row is None:
            result.dropped.append(occurrence)
            result.hidden_counts[col] = result.hidden_counts.get(col, 0) + 1
            return

        grid.occupy(row, col, col)
        result.positioned.append(self._bar(occurrence, row, col, col, len(units)))

    def _bar(
        self,
        occurrence: Occurrence,
        row: int,
        first: int,
        last: int,
        total: int,
        truncated_start: bool = False,
        truncated_end: bool = False,
    ) -> PositionedOccurrence:
        return PositionedOccurrence(
            occurrence=occurrence,
            left=first / total * 100,
            width=(last - first + 1) / total * 100,
            top=self.config.row_top(row),
            height=self.config.bar_height,
            z_index=0,
            position=row,
            is_truncated_start=truncated_start,
            is_truncated_end=truncated_end,
        )

    # ==================== Time-axis layout ====================

    def layout_day(
        self,
        occurrences: List[Occurrence],
        day: Union[datetime, date],
        visible_hours: Optional[VisibleHours] = None,
    ) -> List[PositionedOccurrence]:
        """
        Lay out the timed occurrences of one day column.

        Overlapping occurrences form clusters. The longest member of a
        cluster spans the full width at the back; the others are offset
        to the right in equal steps and stacked on top.
        """
        hours = visible_hours or VisibleHours()
        visible_start, visible_end = hours.bounds()
        visible_span = hours.span
        if visible_span <= 0:
            return []

        day_start = start_of_day(day)
        next_day = day_start + timedelta(days=1)

        items = []
        for occurrence in occurrences:
            if occurrence.all_day:
                continue
            start, end = self._wall(occurrence.start), self._wall(occurrence.end)
            if start == end:
                if not day_start <= start < next_day:
                    continue
            elif start >= next_day or end <= day_start:
                continue
            start_h = 0.0 if start < day_start else self._hours(start - day_start)
            end_h = 24.0 if end >= next_day else self._hours(end - day_start)
            items.append((start_h, end_h, start < day_start, end > next_day, occurrence))

        items.sort(key=lambda item: item[0])

        positioned: List[PositionedOccurrence] = []
        for cluster in self._clusters(items):
            if len(cluster) > 1:
                cluster = sorted(cluster, key=lambda item: (-item[4].duration(), item[0]))
            step = cluster_spread(len(cluster)) / (len(cluster) - 1) if len(cluster) > 1 else 0.0

            for index, (start_h, end_h, cut_start, cut_end, occurrence) in enumerate(cluster):
                if start_h == end_h:
                    if not visible_start <= start_h < visible_end:
                        continue
                elif end_h <= visible_start or start_h >= visible_end:
                    continue

                shown_start = max(start_h, visible_start)
                shown_end = min(end_h, visible_end)
                left = step * index
                positioned.append(PositionedOccurrence(
                    occurrence=occurrence,
                    left=left,
                    width=100 - left,
                    top=(shown_start - visible_start) / visible_span * 100,
                    height=(shown_end - shown_start) / visible_span * 100,
                    z_index=index + 1,
                    position=None,
                    is_truncated_start=cut_start or start_h < visible_start,
                    is_truncated_end=cut_end or end_h > visible_end,
                ))

        return positioned

    @staticmethod
    def _clusters(items: List[Tuple]) -> List[List[Tuple]]:
        """Split start-sorted items where a start reaches the running max end."""
        clusters: List[List[Tuple]] = []
        running_end = None
        for item in items:
            if running_end is None or item[0] >= running_end:
                clusters.append([])
                running_end = item[1]
            else:
                running_end = max(running_end, item[1])
            clusters[-1].append(item)
        return clusters

    @staticmethod
    def _hours(delta: timedelta) -> float:
        return delta.total_seconds() / 3600

    def _wall(self, value: Union[datetime, date]) -> datetime:
        if not isinstance(value, datetime):
            return start_of_day(value)
        return to_wall_time(value, self.tz)
