"""
Structured (tier 1) extraction.

Works on the server-rendered HTML of a job page, in strict priority order:
1. JSON-LD JobPosting schema
2. Server-rendered description selectors
3. Header-field scan (salary, seniority, job type, applicants, easy apply)

The first non-empty description wins. Header fields are merged from whichever
stage yields a value.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from .jsonld import JSONLDExtractor
from .heuristics import HeuristicExtractor
from .outcomes import ExtractionResult, SourceStrategy

logger = logging.getLogger(__name__)


class StructuredExtractor:
    """Tier 1 extraction orchestrator."""

    def __init__(self, min_ssr_length: int = 100):
        self.jsonld_extractor = JSONLDExtractor()
        self.heuristic_extractor = HeuristicExtractor(min_description_length=min_ssr_length)

    def extract(self, html: str, soup: Optional[BeautifulSoup] = None,
                job_id: Optional[object] = None) -> ExtractionResult:
        """
        Extract from fetched HTML.

        Args:
            html: Raw HTML content
            soup: Pre-parsed BeautifulSoup object (optional)
            job_id: Used for log context only

        Returns:
            ExtractionResult; description is None when tier 1 found nothing
        """
        if soup is None:
            soup = BeautifulSoup(html, 'lxml')

        # Stage 1: JSON-LD
        result = self.jsonld_extractor.extract(soup)
        if result is not None:
            logger.info(f"[enrich] job {job_id}: JSON-LD -> {len(result.description)} chars")
        else:
            logger.info(f"[enrich] job {job_id}: JSON-LD -> not found")
            result = ExtractionResult()

            # Stage 2: SSR description selectors
            found = self.heuristic_extractor.extract_description(soup)
            if found:
                description, selector = found
                logger.info(f"[enrich] job {job_id}: SSR \"{selector}\" -> {len(description)} chars")
                result = result.model_copy(update={
                    'description': description,
                    'source_strategy': SourceStrategy.SSR_SELECTOR,
                })

        # Stage 3: header fields fill whatever the earlier stages left empty
        header = self.heuristic_extractor.extract_header_fields(soup)
        return result.merge_missing(header)
