"""
Run one nadlan deals scrape synchronously from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.config import get_nadlan_scraping_settings
from app.domain.jobs import JobStatus
from app.domain.nadlan import ScrapeRequest
from app.jobs.registry import JobRegistry
from app.schemas.scrape import ScrapeOutcomePayload
from app.services.nadlan_scraping_service import NadlanScrapingService
from app.services.scrape_job_service import InlineTaskExecutor, ScrapeJobService


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape nadlan.gov.il deals for one address.")
    parser.add_argument("--city", required=True, help="City name, e.g. 'תל אביב יפו'.")
    parser.add_argument("--street", required=True, help="Street name.")
    parser.add_argument("--house", required=True, help="House number.")
    parser.add_argument(
        "--max-pages",
        dest="max_pages",
        type=int,
        default=None,
        help="Page cap (defaults to NADLAN_DEFAULT_MAX_PAGES).",
    )
    args = parser.parse_args()
    if args.max_pages is not None and args.max_pages < 1:
        parser.error("--max-pages must be a positive integer")

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    request = ScrapeRequest(
        city_name=args.city.strip(),
        street=args.street.strip(),
        house_number=args.house.strip(),
        max_pages=args.max_pages or get_nadlan_scraping_settings().default_max_pages,
    )
    registry = JobRegistry()
    service = ScrapeJobService(registry=registry, scraping_service=NadlanScrapingService())
    job = service.trigger_scrape(executor=InlineTaskExecutor(), request=request)
    finished = registry.get(job.id)

    if finished is None or finished.status != JobStatus.DONE or finished.result is None:
        error = finished.error if finished else "job vanished"
        print(json.dumps({"jobId": job.id, "status": JobStatus.ERROR, "error": error}, ensure_ascii=False))
        return 1

    payload = ScrapeOutcomePayload.from_outcome(finished.result).model_dump(mode="json", by_alias=True)
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if finished.result.success else 2


if __name__ == "__main__":
    raise SystemExit(main())
