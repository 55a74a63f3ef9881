"""
Rendered-DOM (tier 2) extraction.

Drives the shared browser surface for pages whose description only appears
after client-side rendering. One lease per attempt:
navigate -> settle -> auth check -> expand -> settle -> isolate section -> header fields
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.config import EnrichmentConfig
from .auth_wall import is_login_url
from .dom_strategies import (
    DOM_HEADER_SELECTORS,
    ExpandStrategy,
    HeadingSectionStrategy,
    SectionStrategy,
    SelectorSectionStrategy,
    default_expanders,
    first_matching_text,
)
from .outcomes import ExtractionResult, SourceStrategy
from .text import parse_count
from .throttle import Throttle

logger = logging.getLogger(__name__)


@dataclass
class DomExtraction:
    """What one rendered-page visit produced."""
    resolved_url: str = ""
    auth_required: bool = False
    description: Optional[str] = None
    source: Optional[SourceStrategy] = None
    expand_label: Optional[str] = None
    header: Dict[str, Optional[str]] = field(default_factory=dict)

    def to_result(self) -> ExtractionResult:
        """Project onto the persisted extraction fields."""
        return ExtractionResult(
            description=self.description,
            salary=self.header.get('salary'),
            job_type=self.header.get('job_type'),
            num_applicants=parse_count(self.header.get('applicant_count')),
            source_strategy=self.source,
            auth_required=self.auth_required,
        )


class RenderedDOMExtractor:
    """Tier 2 extraction over a leased browser page."""

    def __init__(
        self,
        surface,
        throttle: Throttle,
        config: Optional[EnrichmentConfig] = None,
        expanders: Optional[List[ExpandStrategy]] = None,
        sections: Optional[List[SectionStrategy]] = None,
    ):
        self.surface = surface
        self.throttle = throttle
        self.config = config or EnrichmentConfig()
        self.expanders = expanders if expanders is not None else default_expanders()
        self.sections = sections if sections is not None else [
            HeadingSectionStrategy(
                min_offset=self.config.noise_min_offset,
                min_length=self.config.min_section_length,
            ),
            SelectorSectionStrategy(
                min_length=self.config.min_selector_length,
                min_line_breaks=self.config.min_selector_line_breaks,
            ),
        ]

    async def extract(self, url: str, job_id: Optional[object] = None) -> DomExtraction:
        """
        Visit a job page in the browser and extract what the DOM offers.

        Args:
            url: Job page URL
            job_id: Used for log context only

        Returns:
            DomExtraction; auth_required is set (and nothing else extracted)
            when the browser lands on a login page
        """
        async with self.surface.lease() as lease:
            resolved_url = await lease.goto(url)
            await self.throttle.settle(self.config.render_settle_s)

            # Client-side redirects may happen while the app renders
            resolved_url = lease.page.url or resolved_url
            if is_login_url(resolved_url):
                logger.info(f"[enrich-dom] job {job_id}: auth wall after navigation ({resolved_url})")
                return DomExtraction(resolved_url=resolved_url, auth_required=True)

            page = lease.page
            extraction = DomExtraction(resolved_url=resolved_url)

            extraction.expand_label = await self._expand(page)
            if extraction.expand_label:
                logger.info(f"[enrich-dom] job {job_id}: expanded via {extraction.expand_label}")
                await self.throttle.settle(self.config.expand_settle_s)
            else:
                logger.info(f"[enrich-dom] job {job_id}: no expand control found")

            for strategy in self.sections:
                description = await strategy.extract(page)
                if description:
                    extraction.description = description
                    extraction.source = strategy.source
                    break

            logger.info(
                f"[enrich-dom] description source: {extraction.source.value if extraction.source else 'none'}"
                f" | length: {len(extraction.description) if extraction.description else 0}"
            )

            for name, selectors in DOM_HEADER_SELECTORS.items():
                extraction.header[name] = await first_matching_text(
                    page, selectors, self.config.header_max_length
                )

            header = extraction.header
            logger.info(
                f"[enrich-dom] job {job_id}: header title={header.get('title')!r}"
                f" | company={header.get('company')!r} | location={header.get('location')!r}"
                f" | workplace={header.get('workplace_type')!r}"
            )

            return extraction

    async def _expand(self, page) -> Optional[str]:
        for expander in self.expanders:
            label = await expander.trigger(page)
            if label:
                return label
        return None
