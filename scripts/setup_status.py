#!/usr/bin/env python3
"""
Print setup wizard progress: completion, per-step status and nudges.
"""

import argparse
import json
import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from corecomply.context import AppContext
from corecomply.core.errors import ConfigurationError


def format_status(status, visited):
    mark = "x" if status["complete"] else " "
    seen = " (visited)" if status["key"] in visited else ""
    line = f"[{mark}] {status['title']}{seen}"
    if status["nudge"] and not status["complete"]:
        line += f"\n      {status['nudge']}"
    if status["manual_fallback"] and not status["complete"]:
        line += f"\n      Manual option: {status['manual_fallback']}"
    return line


def main():
    parser = argparse.ArgumentParser(
        description="Show CoreComply setup completion"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit machine-readable JSON instead of text"
    )
    args = parser.parse_args()

    try:
        context = AppContext.from_config()
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 1

    statuses = context.calculator.step_statuses()
    completion = context.calculator.calculate_completion()
    visited = context.setup.visited

    if args.json:
        print(json.dumps({
            "completion": completion,
            "last_step": context.setup.last_step.value if context.setup.last_step else None,
            "steps": [
                {
                    "key": s["key"].value,
                    "title": s["title"],
                    "complete": s["complete"],
                    "visited": s["key"] in visited,
                    "nudge": s["nudge"],
                }
                for s in statuses
            ],
        }, indent=2))
        return 0

    print(f"Setup completion: {completion}%")
    for status in statuses:
        print(format_status(status, visited))
    return 0


if __name__ == "__main__":
    sys.exit(main())
