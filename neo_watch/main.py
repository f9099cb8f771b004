#!/usr/bin/env python3
"""
NEO Watch - Near Earth Object threat overview from the command line

Fetches the NASA NeoWs feed for a date window of any length, classifies
every object and prints the results with a summary.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from .classifier import RiskLevel
from .config import config
from .date_range import parse_window
from .errors import NeoWatchError, ValidationError
from .models import NormalizedAsteroid
from .service import FeedReport, create_service


# ANSI colors for terminal output
class Colors:
    RED = '\033[91m'
    YELLOW = '\033[93m'
    GREEN = '\033[92m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    BOLD = '\033[1m'
    END = '\033[0m'


def risk_color(level: RiskLevel) -> str:
    """Get color for risk level"""
    colors = {
        RiskLevel.LOW: Colors.GREEN,
        RiskLevel.MEDIUM: Colors.YELLOW,
        RiskLevel.HIGH: Colors.RED + Colors.BOLD,
    }
    return colors.get(level, '')


def print_header():
    print(f"""
{Colors.CYAN}{'=' * 70}
{Colors.BOLD}    NEO WATCH - Near Earth Object Threat Overview
{Colors.END}{Colors.CYAN}    Data: NASA NeoWs
{'=' * 70}{Colors.END}
""")


def display_asteroids(asteroids: list[NormalizedAsteroid], top_n: int):
    print(f"\n{Colors.BOLD}{'=' * 70}")
    print(f" CLOSE APPROACHES ({min(top_n, len(asteroids))} of {len(asteroids)})")
    print(f"{'=' * 70}{Colors.END}\n")

    for i, neo in enumerate(asteroids[:top_n]):
        color = risk_color(neo.risk_level)
        hazard_flag = " [PHA]" if neo.is_hazardous else ""

        print(f"{color}{i+1}. {neo.name}{hazard_flag}{Colors.END}")
        print(f"   Risk Level: {color}{neo.risk_level.value}{Colors.END}")
        print(f"   Approach: {neo.approach_timestamp:%Y-%m-%d %H:%M} UTC")
        print(f"   Diameter: {neo.avg_diameter_m:.0f} m ({neo.diameter_min_m:.0f}-{neo.diameter_max_m:.0f} m)")
        print(f"   Velocity: {neo.velocity_km_per_sec:.2f} km/s")
        print(f"   Miss Distance: {neo.distance_au:.6f} AU, {neo.distance_lunar:.1f} LD ({neo.distance_km:,.0f} km)")
        print()


def display_summary(report: FeedReport):
    summary = report.summary
    print(f"\n{Colors.BOLD}{'=' * 70}")
    print(" SUMMARY")
    print(f"{'=' * 70}{Colors.END}\n")

    print("Risk Level Distribution:")
    for level in RiskLevel:
        count = summary.risk_counts.get(level, 0)
        print(f"  {risk_color(level)}{level.value:8}{Colors.END} {'#' * count} ({count})")

    print(f"\n{Colors.RED}Potentially Hazardous Asteroids (PHA): "
          f"{summary.hazardous_count} ({summary.hazardous_percentage}%){Colors.END}")
    print(f"Average upper size estimate: {summary.average_size_m:,.0f} m")

    if report.asteroids:
        closest = min(report.asteroids, key=lambda a: a.distance_km)
        print(f"\nClosest Approach: {closest.name}")
        print(f"  {closest.distance_lunar:.1f} lunar distances on {closest.approach_timestamp:%Y-%m-%d}")

    if report.partial:
        print(f"\n{Colors.YELLOW}Partial data: {len(report.failures)} sub-window(s) could not be fetched{Colors.END}")
        for failure in report.failures:
            print(f"  {failure.window}: {failure.code} {failure.message}")


async def run(start: str, end: str, hazardous_only: bool, days: Optional[int] = None) -> FeedReport:
    window = parse_window(start, end, config.MAX_WINDOW_DAYS, days=days)
    service = create_service()
    try:
        report = await service.classified_feed(window)
    finally:
        await service.close()

    if hazardous_only:
        report.asteroids = [a for a in report.asteroids if a.is_hazardous]
    return report


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="NEO Watch - Near Earth Object threat overview",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  neo-watch                                     # Next 7 days
  neo-watch --start 2024-01-01 --end 2024-01-31 # Any window, split into 7-day feeds
  neo-watch --days 30                           # Today through 30 days from now
  neo-watch --hazardous-only                    # Only potentially hazardous objects
        """
    )

    parser.add_argument('--start', type=str, help='Window start (YYYY-MM-DD, default: today)')
    window_end = parser.add_mutually_exclusive_group()
    window_end.add_argument('--end', type=str, help='Window end (YYYY-MM-DD, default: start + 7 days)')
    window_end.add_argument('--days', type=int, help='Window length in days after start')
    parser.add_argument('--top', type=int, default=25,
                        help='Number of asteroids to display (default: 25)')
    parser.add_argument('--hazardous-only', action='store_true',
                        help='Only show potentially hazardous asteroids')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    for warning in config.validate():
        logging.getLogger(__name__).warning(warning)

    print_header()
    print(f"{Colors.CYAN}Fetching NEO data from NASA...{Colors.END}")

    try:
        report = asyncio.run(run(args.start, args.end, args.hazardous_only, args.days))
    except ValidationError as e:
        print(f"{Colors.RED}{e.code}: {e.message}{Colors.END}")
        sys.exit(2)
    except NeoWatchError as e:
        print(f"{Colors.RED}Error fetching NEO data: {e.message}{Colors.END}")
        sys.exit(1)

    print(f"Found {len(report.asteroids)} near-Earth objects between "
          f"{report.window.start} and {report.window.end}")

    display_asteroids(report.asteroids, args.top)
    display_summary(report)


if __name__ == "__main__":
    main()
