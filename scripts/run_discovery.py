#!/usr/bin/env python3
"""
Run evidence discovery for a reporting period from the command line.

Scores every integration adapter's records against an obligation register and
appends the resulting artifacts to the persisted evidence store.
"""

import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from corecomply.context import AppContext
from corecomply.core.errors import ConfigurationError
from corecomply.core.schema import Footprint, Obligation, Period
from corecomply.evidence.adapters import get_sample_obligations


def load_obligations(path):
    """Read a JSON list of obligations from path."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [Obligation.model_validate(item) for item in data]


def main():
    parser = argparse.ArgumentParser(
        description="Discover compliance evidence from connected integrations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 2024-07-01 2024-12-31 --sample-obligations
  %(prog)s 2024-07-01 2024-12-31 --states NSW VIC --obligations register.json

The footprint defaults to the states of the sites in the company profile.

Environment variables:
- DB_PATH=./data/corecomply.db (evidence store database)
- MATCH_THRESHOLD=0.50, MATCH_TOP_N=3
- DISCOVERY_ADAPTER_TIMEOUT_SEC=0 (0 disables the per-adapter timeout)
        """
    )

    parser.add_argument("start", type=date.fromisoformat, help="Period start (YYYY-MM-DD)")
    parser.add_argument("end", type=date.fromisoformat, help="Period end (YYYY-MM-DD)")

    parser.add_argument(
        "--states",
        nargs="+",
        help="Footprint states (e.g. NSW VIC); overrides the company profile"
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--sample-obligations",
        action="store_true",
        help="Match against the built-in sample obligation register"
    )
    source.add_argument(
        "--obligations",
        metavar="FILE",
        help="JSON file holding a list of obligations (id, title, control_ref, tags)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="List every artifact added"
    )

    args = parser.parse_args()

    try:
        period = Period(start=args.start, end=args.end)
        obligations = get_sample_obligations() if args.sample_obligations else load_obligations(args.obligations)
        footprint = Footprint(states=args.states) if args.states else None

        context = AppContext.from_config()
        before = len(context.evidence.artifacts)
        report = asyncio.run(context.run_discovery(period, obligations, footprint=footprint))

        print(f"Discovery finished: {report.artifacts_added} artifacts added")
        for adapter_name, count in report.per_adapter.items():
            marker = " (FAILED)" if adapter_name in report.failed_adapters else ""
            print(f"  {adapter_name}: {count}{marker}")
        print(f"Setup completion: {context.setup.completion}%")

        if args.verbose:
            for artifact in context.evidence.artifacts[before:]:
                refs = ", ".join(artifact.obligation_refs) or "-"
                print(f"  [{artifact.source.value}] {artifact.title} -> {refs} ({artifact.confidence})")

        return 0 if report.succeeded else 2

    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 1
    except ValueError as e:
        print(f"ERROR: Invalid input: {e}")
        return 1
    except OSError as e:
        print(f"ERROR: Could not read obligations: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
