#!/usr/bin/env python3
"""
Command-line search over the aggregated course and job providers.

Providers without credentials in the environment (or .env file) answer with
sample data.

Usage:
    python scripts/search_catalog.py courses "python" [--limit 10] [--providers coursera udemy]
    python scripts/search_catalog.py jobs "data engineer" [--location London] [--remote]
    python scripts/search_catalog.py trends python rust
    python scripts/search_catalog.py status
"""

import argparse
import logging
import sys

from content_services.aggregation import AggregationService
from content_services.shared.errors import InvalidQuery
from content_services.shared.structured_logging import configure_logging

logger = logging.getLogger(__name__)


def print_records(records, provenance=None):
    for position, record in enumerate(records, start=1):
        attrs = record.attributes
        details = []
        if attrs.rating is not None:
            details.append(f"rating {attrs.rating:.1f}")
        if attrs.price is not None:
            details.append("free" if attrs.price == 0 else f"price {attrs.price:g}")
        if attrs.company:
            details.append(attrs.company)
        if attrs.location:
            details.append(attrs.location)
        if attrs.salary_range and attrs.salary_range.midpoint is not None:
            details.append(f"~{attrs.salary_range.midpoint:,.0f} {attrs.salary_range.currency}")
        print(f"{position:>3}. [{record.provider}] {record.title}")
        if details:
            print(f"     {' | '.join(details)}")
        if record.url:
            print(f"     {record.url}")

    if provenance is not None:
        print()
        print(f"Succeeded: {', '.join(provenance.providers_succeeded) or '-'}")
        if provenance.providers_failed:
            failed = ", ".join(f"{f.provider} ({f.reason})" for f in provenance.providers_failed)
            print(f"Failed: {failed}")
        if provenance.providers_skipped:
            print(f"Rate limited: {', '.join(provenance.providers_skipped)}")
        if provenance.used_fallback:
            print("Showing sample data: no provider returned live results")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Search aggregated course and job providers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    courses = subparsers.add_parser("courses", help="Search courses")
    courses.add_argument("query")
    courses.add_argument("--limit", type=int, default=20)
    courses.add_argument("--providers", nargs="+", default=None)
    courses.add_argument("--level", default="all")
    courses.add_argument("--language", default="en")

    jobs = subparsers.add_parser("jobs", help="Search jobs")
    jobs.add_argument("query")
    jobs.add_argument("--limit", type=int, default=25)
    jobs.add_argument("--location", default=None)
    jobs.add_argument("--remote", action="store_true")

    trends = subparsers.add_parser("trends", help="Job-market trends per skill")
    trends.add_argument("skills", nargs="+")

    subparsers.add_parser("status", help="Show provider and cache status")

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    service = AggregationService.from_env()
    try:
        if args.command == "courses":
            outcome = service.search_courses_outcome(
                args.query,
                providers=args.providers,
                limit=args.limit,
                skill_level=args.level,
                language=args.language,
            )
            print_records(outcome.records, outcome)
        elif args.command == "jobs":
            outcome = service.search_jobs_outcome(
                args.query, limit=args.limit, location=args.location, remote=args.remote
            )
            print_records(outcome.records, outcome)
        elif args.command == "trends":
            for result in service.get_job_market_trends(args.skills):
                salary = f"{result.average_salary:,.0f}" if result.average_salary else "n/a"
                print(f"{result.skill}: demand {result.demand}, {result.job_count} job(s)")
                print(f"  average salary: {salary}, growth: {result.growth_rate_percent:g}%")
                locations = ", ".join(f"{loc.location} ({loc.count})" for loc in result.top_locations)
                print(f"  top locations: {locations or '-'}")
                skills = ", ".join(f"{s.skill} ({s.frequency})" for s in result.required_skills)
                print(f"  required skills: {skills or '-'}")
        else:
            status = service.get_status()
            for provider in status.providers:
                state = "configured" if provider.configured else "sample data"
                print(
                    f"{provider.name:<10} {provider.kind:<7} {state:<12} "
                    f"{provider.rate_limit_per_hour}/hour"
                )
            cache = status.cache
            tier = "in-process + redis" if cache.distributed else "in-process"
            print(f"cache: {cache.entry_count} entries, ttl {cache.ttl_seconds}s ({tier})")
    except InvalidQuery as e:
        logger.error(f"Invalid query: {e}")
        sys.exit(2)
    finally:
        service.close()


if __name__ == "__main__":
    main()
