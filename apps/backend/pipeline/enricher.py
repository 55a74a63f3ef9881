"""
Batch enrichment orchestrator.

For each job id, strictly in order:
1. Resolve the stored job (no URL -> skip, no fetch, no delay)
2. Tier 1: server-side fetch, auth-wall check, structured extraction
3. Tier 2: rendered-DOM extraction, only when tier 1 found no description
4. Cleanup of the winning description
5. One write-back per job, driven by the job's outcome
6. Politeness delay before the next job
"""

import asyncio
import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup

from core.config import EnrichmentConfig
from core.job_store import JobStore
from core.net import HTTPClient
from core.secrets import SessionProvider
from .auth_wall import AuthWallDetector, is_login_url
from .cleanup import DescriptionCleaner
from .dom_extractor import RenderedDOMExtractor
from .errors import BatchTooLarge, FetchError, JobStoreError, RenderSurfaceUnavailable
from .extractor import StructuredExtractor
from .outcomes import (
    CANCELLED_MESSAGE,
    AuthRequired,
    ExtractionResult,
    FetchFailed,
    JobOutcome,
    JobRecord,
    NoDescription,
    NoUrl,
    SourceStrategy,
    Success,
)
from .throttle import SleepFunc, Throttle

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 300


class BatchEnricher:
    """Enriches a bounded batch of stored jobs, one at a time."""

    def __init__(
        self,
        store: JobStore,
        session: SessionProvider,
        dom_extractor: Optional[RenderedDOMExtractor],
        http_client: Optional[HTTPClient] = None,
        structured: Optional[StructuredExtractor] = None,
        cleaner: Optional[DescriptionCleaner] = None,
        throttle: Optional[Throttle] = None,
        detector: Optional[AuthWallDetector] = None,
        config: Optional[EnrichmentConfig] = None,
    ):
        self.config = config or EnrichmentConfig()
        self.store = store
        self.session = session
        self.dom_extractor = dom_extractor
        self.http_client = http_client or HTTPClient(timeout=self.config.fetch_timeout_s)
        self.structured = structured or StructuredExtractor(min_ssr_length=self.config.min_ssr_length)
        self.cleaner = cleaner or DescriptionCleaner(
            api_key=session.model_api_key,
            model=self.config.cleanup_model,
            min_length=self.config.cleanup_min_length,
            max_input_chars=self.config.cleanup_max_input,
        )
        self.throttle = throttle or Throttle.from_config(self.config)
        self.detector = detector or AuthWallDetector()

    @classmethod
    def build(
        cls,
        store: JobStore,
        session: SessionProvider,
        surface,
        config: Optional[EnrichmentConfig] = None,
        sleep: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
        **kwargs,
    ) -> "BatchEnricher":
        """Wire the default components around a rendering surface."""
        config = config or EnrichmentConfig()
        throttle = Throttle.from_config(config, sleep=sleep, rng=rng)
        dom_extractor = RenderedDOMExtractor(surface, throttle, config) if surface is not None else None
        return cls(store, session, dom_extractor, throttle=throttle, config=config, **kwargs)

    async def enrich_batch(
        self,
        job_ids: Sequence[Any],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Dict[Any, Dict[str, Any]]:
        """
        Enrich a batch of jobs.

        Args:
            job_ids: Stored job identifiers, at most config.max_batch_size
            cancel_event: When set, jobs not yet started are reported as cancelled

        Returns:
            {job_id: {"success": bool, "error"?: str}} for every id

        Raises:
            BatchTooLarge: Before any store read or network activity
            RenderSurfaceUnavailable: If no rendering surface is available
        """
        job_ids = list(job_ids)
        if len(job_ids) > self.config.max_batch_size:
            raise BatchTooLarge(len(job_ids), self.config.max_batch_size)

        if self.dom_extractor is None or not getattr(self.dom_extractor.surface, 'available', True):
            raise RenderSurfaceUnavailable("Rendering browser surface is not available")

        logger.info(f"[enrich] Starting batch of {len(job_ids)} jobs")
        results: Dict[Any, Dict[str, Any]] = {}

        for index, job_id in enumerate(job_ids):
            if cancel_event is not None and cancel_event.is_set():
                self._cancel_remaining(job_ids[index:], results)
                break

            try:
                job = self.store.get_job(job_id)
            except JobStoreError as e:
                logger.error(f"[enrich] job {job_id}: could not load job: {e}")
                results[job_id] = {"success": False, "error": str(e)}
                continue

            if job is None or not job.url:
                logger.info(f"[enrich] job {job_id}: no URL, skipping")
                results[job_id] = NoUrl().to_entry()
                continue

            try:
                outcome = await self.enrich_one(job)
            except Exception as e:
                logger.error(f"[enrich] job {job_id}: enrichment error: {e}", exc_info=True)
                outcome = FetchFailed(str(e) or type(e).__name__)
            results[job_id] = self._write_back(job, outcome)

            if index < len(job_ids) - 1:
                await self.throttle.pause_after(outcome)

        succeeded = sum(1 for entry in results.values() if entry.get("success"))
        logger.info(f"[enrich] Batch complete: {succeeded}/{len(job_ids)} enriched")
        return results

    async def enrich_one(self, job: JobRecord) -> JobOutcome:
        """
        Run the extraction tiers for one job with a URL.

        Never raises for per-job failures; every path ends in an outcome.
        """
        if not self.session.has_session():
            return self._auth_required(job, "no LinkedIn session cookie")

        tier1 = ExtractionResult()
        try:
            fetched = await self.http_client.fetch_page(job.url, self.session.cookie_header())
        except FetchError as e:
            if is_login_url(e.url):
                return self._auth_required(job, f"redirected to {e.url}")
            logger.info(f"[enrich] job {job.id}: server fetch failed ({e.reason}), trying browser")
            fetched = None

        if fetched is not None:
            soup = BeautifulSoup(fetched.html, 'lxml')
            verdict = self.detector.inspect(fetched.url, soup=soup)
            if verdict.auth_required:
                return self._auth_required(job, verdict.reason)
            tier1 = self.structured.extract(fetched.html, soup=soup, job_id=job.id)

        if tier1.has_description():
            return await self._succeed(job, tier1, tier1.source_strategy)

        return await self._enrich_rendered(job, tier1)

    async def _enrich_rendered(self, job: JobRecord, tier1: ExtractionResult) -> JobOutcome:
        logger.info(f"[enrich] job {job.id}: falling back to rendered page")
        try:
            dom = await self.dom_extractor.extract(job.url, job_id=job.id)
        except Exception as e:
            logger.error(f"[enrich] job {job.id}: rendered extraction error: {e}", exc_info=True)
            return FetchFailed(str(e) or type(e).__name__)

        if dom.auth_required:
            return self._auth_required(job, f"redirected to {dom.resolved_url}")

        rendered = dom.to_result()
        logger.info(
            f"[enrich] job {job.id}: DOM result, source: "
            f"{dom.source.value if dom.source else 'none'}, desc length: {len(dom.description or '')}"
        )
        if not rendered.has_description():
            return NoDescription(detail=f"no description at {dom.resolved_url}")

        # Rendered header values win, tier 1 fills the gaps
        return await self._succeed(job, rendered.merge_missing(tier1), dom.source)

    async def _succeed(self, job: JobRecord, result: ExtractionResult,
                       strategy: SourceStrategy) -> Success:
        raw = result.description
        logger.debug(f"[enrich] job {job.id}: raw description (first {PREVIEW_CHARS}): {raw[:PREVIEW_CHARS]}")
        cleaned = await self.cleaner.clean(raw, job_id=job.id)
        logger.debug(f"[enrich] job {job.id}: cleaned description (first {PREVIEW_CHARS}): {cleaned[:PREVIEW_CHARS]}")

        result = result.model_copy(update={'description': cleaned, 'source_strategy': strategy})
        logger.info(f"[enrich] job {job.id}: enriched via {strategy.value} ({len(cleaned)} chars)")
        return Success(result=result, strategy=strategy)

    def _auth_required(self, job: JobRecord, reason: str) -> AuthRequired:
        logger.warning(f"[enrich] job {job.id}: auth wall ({reason})")
        self.session.report_session_invalid(reason)
        return AuthRequired(reason=reason)

    def _write_back(self, job: JobRecord, outcome: JobOutcome) -> Dict[str, Any]:
        """
        Persist the outcome and return its result entry.

        The only place the pipeline writes to the store.
        """
        entry = outcome.to_entry()
        if isinstance(outcome, NoUrl):
            return entry
        try:
            if isinstance(outcome, Success):
                self.store.save_enrichment(job.id, outcome.result)
            else:
                self.store.mark_failed(job.id)
        except JobStoreError as e:
            logger.error(f"[enrich] job {job.id}: write-back failed: {e}")
            return {"success": False, "error": str(e)}
        return entry

    def _cancel_remaining(self, remaining: List[Any], results: Dict[Any, Dict[str, Any]]) -> None:
        logger.info(f"[enrich] Cancelled, {len(remaining)} jobs not started")
        for job_id in remaining:
            results[job_id] = {"success": False, "error": CANCELLED_MESSAGE}
