# File: calendar_core/__main__.py
#
# Lay out a JSON calendar scenario and print the result as JSON.
#
#   python -m calendar_core scenario.json [output.json]

import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, List

from calendar_core.core.config_manager import Config
from calendar_core.core.orchestrator import CalendarOrchestrator
from calendar_core.models import GridType, VisibleHours, coerce_datetime, events_from_list, resource_from_dict
from calendar_core.utils.dates import days_between
from calendar_core.utils.visible_hours import hour_columns


def _scenario_days(scenario: Dict[str, Any]) -> List:
    if scenario.get('days'):
        return [coerce_datetime(day).date() for day in scenario['days']]
    start = coerce_datetime(scenario.get('start'))
    end = coerce_datetime(scenario.get('end')) or start
    if start is None:
        raise ValueError("Scenario needs 'days' or a 'start' date")
    return days_between(start.date(), end.date())


def run_scenario(scenario: Dict[str, Any]) -> Dict[str, Any]:
    """Build the view a scenario asks for and return it as plain data."""
    orchestrator = CalendarOrchestrator()
    view = scenario.get('view', 'month')
    days = _scenario_days(scenario)
    events = events_from_list(scenario.get('events', []))
    visible_hours = VisibleHours.from_dict(scenario.get('visible_hours'))
    max_rows = scenario.get('max_rows')

    if view == 'month':
        return orchestrator.build_month_view(events, days, max_rows).to_dict()

    if view in ('week', 'day'):
        columns = orchestrator.build_time_columns(events, days, visible_hours)
        return {
            day.isoformat(): [item.to_dict() for item in positioned]
            for day, positioned in columns.items()
        }

    if view == 'timeline':
        grid_type = GridType(scenario.get('grid_type', 'day'))
        resources = [resource_from_dict(raw) for raw in scenario.get('resources', [])]
        columns = hour_columns(days, visible_hours) if grid_type == GridType.HOUR else days
        rows = orchestrator.build_resource_timeline(resources, events, columns, grid_type, max_rows)
        return {'rows': [row.to_dict() for row in rows]}

    raise ValueError(f"Unknown view '{view}' (expected month, week, day or timeline)")


def main(argv: List[str]) -> int:
    if len(argv) < 2:
        print("Usage: python -m calendar_core scenario.json [output.json]")
        return 2

    start_time = time.time()
    try:
        if not Config.validate():
            print("\n❌ ERROR: Invalid configuration, check your CALENDAR_* environment variables")
            return 1

        scenario = Config.load_scenario(Path(argv[1]))
        result = run_scenario(scenario)
        output = json.dumps(result, indent=2, ensure_ascii=False)

        if len(argv) > 2:
            Path(argv[2]).write_text(output, encoding='utf-8')
            print(f"Layout written to {argv[2]}")
        else:
            print(output)

    except FileNotFoundError as e:
        print("\n❌ ERROR: Missing File")
        print(f"{e}")
        return 1
    except ValueError as e:
        print("\n❌ ERROR: Invalid scenario")
        print(f"{e}")
        return 1

    print(f"\n--- Total execution time: {time.time() - start_time:.2f} seconds ---", file=sys.stderr)
    return 0


def cli():
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    cli()
