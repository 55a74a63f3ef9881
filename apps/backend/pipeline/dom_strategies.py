"""
Rendered-DOM heuristics for tier 2 extraction.

Two families of pluggable strategies, each tried in a fixed order:
- ExpandStrategy: reveal truncated description text ("show more" controls)
- SectionStrategy: isolate the description text from the rendered page

All strategies talk to the page through Playwright's async locator API.
"""

import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from .outcomes import SourceStrategy

logger = logging.getLogger(__name__)

CLICK_TIMEOUT_MS = 2000

# Expand heuristics
INTERACTIVE_SELECTOR = 'button, a, [role="button"], span[tabindex]'
EXPAND_LABELS = {'show more', 'see more', 'show more description'}
EXPAND_GLYPHS = {'…more', '...more', '…'}
EXPAND_GLYPH_PATTERN = re.compile(r'^[….]{1,3}more$', re.IGNORECASE)
ARIA_COLLAPSED_SELECTOR = '[aria-expanded="false"]'
ARIA_EXPAND_LABEL_PATTERN = re.compile(r'show|more|expand|description', re.IGNORECASE)
EXPAND_CLASS_SELECTORS = [
    '.show-more-less-html__button--more',
    '.inline-show-more-text__button',
    'button[class*="show-more"]',
    '[data-tracking-control-name*="show-more"]',
    '[data-tracking-control-name*="see_more"]',
    '.jobs-description__footer-action',
]

# Section heuristics
SECTION_HEADINGS = ['About the job', 'About the Job']
# Nearest ancestor that looks like the description container
SECTION_CONTAINER_XPATH = (
    "xpath=ancestor::*[contains(@class, 'description') or contains(@class, 'details')"
    " or self::section or self::article or contains(@id, 'job')][1]"
)
PARENT_XPATH = "xpath=.."
NOISE_MARKERS = [
    'Meet the team',
    'People also viewed',
    'Similar jobs',
    'Show more jobs',
    'LinkedIn members',
    'About the company',
    'Report job',
    'Show less',
]
SECTION_SELECTORS = [
    '.show-more-less-html__markup',
    '#job-details',
    '[class*="description"][class*="content"]',
    '[class*="job-description"]',
    '[class*="description__text"]',
    '.jobs-description__content',
    '[class*="description"]',
    '[class*="details"]',
]

# Header fields on the rendered page
DOM_HEADER_SELECTORS = {
    'title': ['h1', '.job-title', '[class*="job-title"]'],
    'company': ['[class*="company-name"]', 'a[class*="company"]', '[class*="employer"]',
                '.topcard__org-name-link'],
    'location': ['[class*="location"]', '.job-location', '.topcard__flavor--bullet'],
    'salary': ['[class*="salary"]', '[class*="compensation"]',
               '.job-details-jobs-unified-top-card__salary-info'],
    'job_type': ['[class*="employment-type"]', '[class*="job-type"]'],
    'workplace_type': ['[class*="workplace"]', '[class*="remote"]', '[class*="work-place"]'],
    'applicant_count': ['[class*="num-applicant"]', '[class*="applicant-count"]',
                        '.num-applicants__caption'],
}


def is_expand_label(text: str) -> bool:
    """True if a control's visible text reads like a "show more" expander."""
    text = (text or "").strip()
    if text.lower() in EXPAND_LABELS or text in EXPAND_GLYPHS:
        return True
    return bool(EXPAND_GLYPH_PATTERN.match(text))


def isolate_section(
    full_text: str,
    heading: str,
    noise_markers: Sequence[str] = NOISE_MARKERS,
    min_offset: int = 100,
    min_length: int = 100,
) -> Optional[str]:
    """
    Cut the description out of a container's text.

    Keeps what follows the heading, then truncates at the first noise marker
    (in list order) that sits beyond min_offset. Markers closer to the start
    are left alone, since short descriptions may legitimately mention them.

    Returns:
        The section text, or None if it is not longer than min_length
    """
    full_text = (full_text or "").strip()
    idx = full_text.find(heading)
    section = full_text[idx + len(heading):].strip() if idx != -1 else full_text

    for marker in noise_markers:
        cut = section.find(marker)
        if cut > min_offset:
            section = section[:cut].strip()
            break

    if len(section) > min_length:
        return section
    return None


async def first_matching_text(page, selectors: Sequence[str], max_length: int = 300) -> Optional[str]:
    """
    Text of the first selector that matches a short, non-empty element.

    Only the first match of each selector is considered.
    """
    for selector in selectors:
        locator = page.locator(selector)
        try:
            if await locator.count() == 0:
                continue
            text = (await locator.first.inner_text()).strip()
        except PlaywrightError as e:
            logger.debug(f"[enrich-dom] header selector {selector} failed: {e}")
            continue
        if text and len(text) < max_length:
            return text
    return None


# ----------------------------
# Expand strategies
# ----------------------------

class ExpandStrategy(ABC):
    """Reveals truncated description text."""

    name: str = "expand"

    @abstractmethod
    async def trigger(self, page) -> Optional[str]:
        """
        Try to click an expander.

        Returns:
            A label describing what was clicked, or None if nothing fired
        """

    async def _click(self, element) -> bool:
        try:
            await element.click(timeout=CLICK_TIMEOUT_MS)
            return True
        except PlaywrightError as e:
            logger.debug(f"[enrich-dom] {self.name} click failed: {e}")
            return False


class TextMatchExpander(ExpandStrategy):
    """Interactive element whose visible text is a "show more" phrase."""

    name = "text"

    async def trigger(self, page) -> Optional[str]:
        candidates = page.locator(INTERACTIVE_SELECTOR)
        texts = await candidates.all_inner_texts()
        for i, text in enumerate(texts):
            text = (text or "").strip()
            if is_expand_label(text) and await self._click(candidates.nth(i)):
                return f"text:{text!r}"
        return None


class AriaExpandedExpander(ExpandStrategy):
    """Collapsed control with an expand-like accessible label."""

    name = "aria"

    async def trigger(self, page) -> Optional[str]:
        candidates = page.locator(ARIA_COLLAPSED_SELECTOR)
        for i in range(await candidates.count()):
            element = candidates.nth(i)
            label = await element.get_attribute('aria-label') or ""
            if ARIA_EXPAND_LABEL_PATTERN.search(label) and await self._click(element):
                return f"aria:{label!r}"
        return None


class ClassNameExpander(ExpandStrategy):
    """Known expander class names and tracking attributes."""

    name = "selector"

    def __init__(self, selectors: Optional[List[str]] = None):
        self.selectors = selectors or EXPAND_CLASS_SELECTORS

    async def trigger(self, page) -> Optional[str]:
        for selector in self.selectors:
            locator = page.locator(selector)
            if await locator.count() == 0:
                continue
            if await self._click(locator.first):
                return f"selector:{selector}"
        return None


def default_expanders() -> List[ExpandStrategy]:
    return [TextMatchExpander(), AriaExpandedExpander(), ClassNameExpander()]


# ----------------------------
# Section strategies
# ----------------------------

class SectionStrategy(ABC):
    """Isolates description text from the rendered page."""

    source: SourceStrategy

    @abstractmethod
    async def extract(self, page) -> Optional[str]:
        """Return qualifying description text, or None."""


class HeadingSectionStrategy(SectionStrategy):
    """Description anchored on the "About the job" heading."""

    source = SourceStrategy.DOM_HEADING

    def __init__(self, headings: Optional[List[str]] = None, noise_markers: Optional[List[str]] = None,
                 min_offset: int = 100, min_length: int = 100):
        self.headings = headings or SECTION_HEADINGS
        self.noise_markers = noise_markers or NOISE_MARKERS
        self.min_offset = min_offset
        self.min_length = min_length

    async def extract(self, page) -> Optional[str]:
        for heading in self.headings:
            matches = page.get_by_text(heading, exact=True)
            for i in range(await matches.count()):
                container_text = await self._container_text(matches.nth(i))
                if not container_text:
                    continue
                section = isolate_section(
                    container_text, heading, self.noise_markers, self.min_offset, self.min_length
                )
                if section:
                    return section
        return None

    async def _container_text(self, heading_element) -> Optional[str]:
        try:
            container = heading_element.locator(SECTION_CONTAINER_XPATH)
            if await container.count() == 0:
                container = heading_element.locator(PARENT_XPATH)
                if await container.count() == 0:
                    return None
            return await container.first.inner_text()
        except PlaywrightError as e:
            logger.debug(f"[enrich-dom] heading container lookup failed: {e}")
            return None


class SelectorSectionStrategy(SectionStrategy):
    """Broad container selectors; only substantial multi-line text qualifies."""

    source = SourceStrategy.DOM_SELECTOR

    def __init__(self, selectors: Optional[List[str]] = None, min_length: int = 150,
                 min_line_breaks: int = 3):
        self.selectors = selectors or SECTION_SELECTORS
        self.min_length = min_length
        self.min_line_breaks = min_line_breaks

    async def extract(self, page) -> Optional[str]:
        for selector in self.selectors:
            locator = page.locator(selector)
            try:
                if await locator.count() == 0:
                    continue
                text = (await locator.first.inner_text()).strip()
            except PlaywrightError as e:
                logger.debug(f"[enrich-dom] section selector {selector} failed: {e}")
                continue
            if len(text) > self.min_length and text.count("\n") >= self.min_line_breaks:
                logger.debug(f"[enrich-dom] section selector {selector} matched")
                return text
        return None
