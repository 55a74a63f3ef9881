#!/usr/bin/env python3
"""
Enrich a batch of stored LinkedIn jobs (at most 10 per run).

Usage:
    python scripts/enrich_batch.py 101 102 103
    python scripts/enrich_batch.py --headed 42
"""
import os
import sys
import json
import asyncio
import logging
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from core.config import EnrichmentConfig
from core.job_store import PostgresJobStore
from core.secrets import SessionProvider, mask_secret
from crawler.browser_crawler import BrowserSurface
from pipeline.enricher import BatchEnricher
from pipeline.errors import EnrichmentError

logger = logging.getLogger(__name__)


async def run(job_ids, headed: bool = False) -> dict:
    config = EnrichmentConfig.from_env()
    session = SessionProvider.from_env()
    session.on_session_invalid(
        lambda reason: logger.warning(f"[session] Log in to LinkedIn again: {reason}")
    )

    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL environment variable is not set")

    logger.info(
        f"Session cookie: {mask_secret(session.cookie_header()) or 'missing'}, "
        f"cleanup: {'enabled' if session.model_api_key else 'disabled'}"
    )

    store = PostgresJobStore(db_url)
    async with BrowserSurface.from_config(config, cookies=session.get_cookies(), headed=headed) as surface:
        enricher = BatchEnricher.build(store, session, surface, config=config)
        return await enricher.enrich_batch(job_ids)


def main():
    parser = argparse.ArgumentParser(description="Enrich stored LinkedIn jobs by id")
    parser.add_argument('job_ids', nargs='+', type=int, help='Job ids to enrich (max 10)')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    try:
        results = asyncio.run(run(args.job_ids, args.headed))
    except EnrichmentError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(json.dumps({str(k): v for k, v in results.items()}, indent=2))


if __name__ == "__main__":
    main()
