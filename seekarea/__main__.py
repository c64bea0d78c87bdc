import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from seekarea import GeoJSONRenderer, describe_entry, geodesic_area_km2
from seekarea.script import ScriptError, build_session, load_script, run_script

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Replay a hide-and-seek game script and narrow the hider's area")
    parser.add_argument("path", help="Path to the JSON game script")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--output",
        help="Write the final candidate and seeker as a GeoJSON FeatureCollection to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading script from %s", args.path)
    try:
        script = load_script(args.path)
        renderer = GeoJSONRenderer(args.output, indent=2) if args.output else None
        session = build_session(script, Path(args.path).resolve().parent, renderer)
        results = run_script(session, script.get("steps") or [])
    except (OSError, ScriptError) as exc:
        logger.error("Script failed: %s", exc)
        raise SystemExit(1)

    failed = [r for r in results if not r.ok]
    logger.info("Replayed %d step(s), %d refused", len(results), len(failed))

    print("History:")
    if session.history:
        for idx, entry in enumerate(session.history, start=1):
            print(f"  {idx}. {describe_entry(entry)}")
    else:
        print("  (none)")

    if failed:
        print("Refused:")
        for result in failed:
            print(f"  - {result.message}")

    print(f"State: {session.state}")
    if session.candidate is not None:
        print(f"Remaining area: {geodesic_area_km2(session.candidate):.1f} km^2")
    if renderer is not None:
        renderer.render(session.candidate, session.seeker)
        print(f"GeoJSON written to {args.output}")


if __name__ == "__main__":
    main(sys.argv[1:])
