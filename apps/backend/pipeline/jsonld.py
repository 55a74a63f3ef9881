"""
JSON-LD extractor.

Extracts job information from structured JSON-LD data (Schema.org JobPosting).
"""

import json
import logging
from typing import Dict, List, Optional, Any
from bs4 import BeautifulSoup

from .outcomes import ExtractionResult, SourceStrategy
from .text import html_to_text

logger = logging.getLogger(__name__)


class JSONLDExtractor:
    """Extracts job data from JSON-LD structured data."""

    def extract(self, soup: BeautifulSoup) -> Optional[ExtractionResult]:
        """
        Extract the first JobPosting that carries a description.

        Returns:
            ExtractionResult with description, salary and job type, or None
        """
        scripts = soup.find_all('script', type='application/ld+json')

        for script in scripts:
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.debug(f"Failed to parse JSON-LD: {e}")
                continue

            for item in self._flatten_jsonld(data):
                if not self._is_job_posting(item) or not item.get('description'):
                    continue
                result = self._extract_job_posting(item)
                if result.has_description():
                    return result

        return None

    def _flatten_jsonld(self, data: Any) -> List[Dict]:
        """Flatten JSON-LD structure to list of items."""
        items = []

        if isinstance(data, dict):
            if self._is_job_posting(data):
                items.append(data)
            elif '@graph' in data and isinstance(data['@graph'], list):
                items.extend([item for item in data['@graph'] if isinstance(item, dict)])
        elif isinstance(data, list):
            for element in data:
                if isinstance(element, dict) and '@graph' in element:
                    items.extend(self._flatten_jsonld(element))
                elif isinstance(element, dict):
                    items.append(element)

        return items

    def _is_job_posting(self, item: Dict) -> bool:
        """Check if JSON-LD item is a JobPosting."""
        item_type = item.get('@type', '')
        if isinstance(item_type, str):
            return 'JobPosting' in item_type
        elif isinstance(item_type, list):
            return any('JobPosting' in str(t) for t in item_type)
        return False

    def _extract_job_posting(self, job_data: Dict) -> ExtractionResult:
        """Extract fields from JobPosting JSON-LD."""
        description = html_to_text(str(job_data['description']))

        return ExtractionResult(
            description=description or None,
            salary=self._extract_salary(job_data.get('baseSalary')),
            job_type=self._extract_employment_type(job_data.get('employmentType')),
            source_strategy=SourceStrategy.JSON_LD,
        )

    def _extract_salary(self, base_salary: Any) -> Optional[str]:
        """
        Format baseSalary as "min–max CURRENCY".

        Handles MonetaryAmount with a nested QuantitativeValue range or a
        single value.
        """
        if not isinstance(base_salary, dict):
            return None

        value = base_salary.get('value')
        currency = base_salary.get('currency')

        if isinstance(value, dict):
            parts = [value.get('minValue'), value.get('maxValue')]
            amount = '–'.join(self._format_amount(p) for p in parts if p not in (None, ''))
            if not amount and value.get('value') not in (None, ''):
                amount = self._format_amount(value['value'])
        elif value not in (None, ''):
            amount = self._format_amount(value)
        else:
            amount = ''

        if not amount:
            return None
        return f"{amount} {currency}" if currency else amount

    def _format_amount(self, amount: Any) -> str:
        if isinstance(amount, float) and amount.is_integer():
            return str(int(amount))
        return str(amount)

    def _extract_employment_type(self, employment_type: Any) -> Optional[str]:
        if not employment_type:
            return None
        if isinstance(employment_type, list):
            return ', '.join(str(t) for t in employment_type if t) or None
        return str(employment_type)
