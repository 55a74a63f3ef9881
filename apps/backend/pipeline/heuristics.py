"""
Heuristic extractor.

Selector- and label-based extraction over server-rendered job page markup:
the description container scan and the header-field scan.
"""

import re
import logging
from typing import Optional, Tuple
from bs4 import BeautifulSoup

from .outcomes import ExtractionResult
from .text import element_text, parse_count

logger = logging.getLogger(__name__)

# Server-rendered description containers, most specific first
DESCRIPTION_SELECTORS = [
    '.show-more-less-html__markup',
    '.description__text',
    '#job-details',
    '[class*="job-description"]',
    '.jobs-description__content',
    '.description__text--rich',
]

SALARY_SELECTORS = '[class*="salary"], .compensation__salary-range'
SENIORITY_SELECTORS = '[class*="seniority"], .description__job-criteria-text'
JOB_TYPE_SELECTORS = '[class*="employment-type"], [class*="job-type"]'
APPLICANT_SELECTORS = '[class*="num-applicant"], [class*="applicant-count"]'
EASY_APPLY_SELECTORS = '[class*="easy-apply"]'

# Labelled "job criteria" list rendered under the description
CRITERIA_ITEM_SELECTOR = '.description__job-criteria-item'
CRITERIA_LABEL_SELECTOR = '.description__job-criteria-subheader'
CRITERIA_VALUE_SELECTOR = '.description__job-criteria-text'
CRITERIA_LABELS = {
    'seniority_level': re.compile(r'seniority', re.I),
    'job_type': re.compile(r'employment type', re.I),
}


class HeuristicExtractor:
    """Extracts job fields from server-rendered markup."""

    def __init__(self, min_description_length: int = 100):
        self.min_description_length = min_description_length

    def extract_description(self, soup: BeautifulSoup) -> Optional[Tuple[str, str]]:
        """
        Scan known description containers in priority order.

        Shorter matches are rejected as false positives (labels, teasers).

        Returns:
            (description, selector) for the first container that qualifies, or None
        """
        for selector in DESCRIPTION_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            text = element_text(element)
            if len(text) > self.min_description_length:
                return text, selector
            logger.debug(f"SSR selector {selector} too short ({len(text)} chars)")
        return None

    def extract_header_fields(self, soup: BeautifulSoup) -> ExtractionResult:
        """
        Scan header/criteria markup for salary, seniority, employment type,
        applicant count and the easy-apply indicator. Each field is independent
        and stays None when not found.
        """
        criteria = self._extract_criteria(soup)

        applicants_text = self._first_text(soup, APPLICANT_SELECTORS)
        easy_apply = True if soup.select_one(EASY_APPLY_SELECTORS) is not None else None

        return ExtractionResult(
            salary=self._first_text(soup, SALARY_SELECTORS),
            seniority_level=criteria.get('seniority_level') or self._first_text(soup, SENIORITY_SELECTORS),
            job_type=criteria.get('job_type') or self._first_text(soup, JOB_TYPE_SELECTORS),
            num_applicants=parse_count(applicants_text),
            easy_apply=easy_apply,
        )

    def _extract_criteria(self, soup: BeautifulSoup) -> dict:
        """Read the labelled criteria list (label -> value pairs)."""
        found = {}
        for item in soup.select(CRITERIA_ITEM_SELECTOR):
            label_elem = item.select_one(CRITERIA_LABEL_SELECTOR)
            value_elem = item.select_one(CRITERIA_VALUE_SELECTOR)
            if label_elem is None or value_elem is None:
                continue
            label = element_text(label_elem)
            value = " ".join(element_text(value_elem).split())
            if not value:
                continue
            for field_name, pattern in CRITERIA_LABELS.items():
                if field_name not in found and pattern.search(label):
                    found[field_name] = value
        return found

    def _first_text(self, soup: BeautifulSoup, selectors: str) -> Optional[str]:
        element = soup.select_one(selectors)
        # Header values are single-line
        text = " ".join(element_text(element).split())
        return text or None
