"""
Test doubles for the enrichment pipeline: job store, browser page and
surface, HTTP client and a recording sleep.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Dict, List, Optional

from playwright.async_api import Error as PlaywrightError

from core.job_store import JobStore
from core.net import FetchResult
from crawler.browser_crawler import SurfaceLease
from pipeline.errors import FetchError
from pipeline.outcomes import JobRecord, JobStatus


# ----------------------------
# Store
# ----------------------------

class InMemoryJobStore(JobStore):
    """JobStore that keeps rows in a dict and records every write."""

    def __init__(self, jobs: Optional[List[JobRecord]] = None):
        self.jobs: Dict = {job.id: job for job in (jobs or [])}
        self.writes: List = []
        self.reads: List = []

    def get_job(self, job_id):
        self.reads.append(job_id)
        return self.jobs.get(job_id)

    def save_enrichment(self, job_id, result):
        self.writes.append(('save', job_id))
        job = self.jobs[job_id]
        updates = {k: v for k, v in result.model_dump(include={
            'description', 'salary', 'seniority_level', 'job_type', 'num_applicants', 'easy_apply'
        }).items() if v is not None}
        updates['status'] = JobStatus.NO_RESPONSE.value
        updates['updated_at'] = datetime.utcnow()
        self.jobs[job_id] = job.model_copy(update=updates)

    def mark_failed(self, job_id):
        self.writes.append(('failed', job_id))
        job = self.jobs[job_id]
        self.jobs[job_id] = job.model_copy(update={
            'status': JobStatus.ENRICHMENT_FAILED.value,
            'updated_at': datetime.utcnow(),
        })


# ----------------------------
# Browser
# ----------------------------

class FakeElement:
    """A rendered element: its inner text, attributes and scoped children."""

    def __init__(self, text: str = "", attrs: Optional[Dict[str, str]] = None,
                 children: Optional[Dict[str, List["FakeElement"]]] = None,
                 fail_click: bool = False):
        self.text = text
        self.attrs = attrs or {}
        self.children = children or {}
        self.fail_click = fail_click
        self.clicked = False


class FakeLocator:
    """Subset of playwright's async Locator over a list of FakeElements."""

    def __init__(self, elements: List[FakeElement]):
        self.elements = elements

    async def count(self) -> int:
        return len(self.elements)

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.elements[index:index + 1])

    @property
    def first(self) -> "FakeLocator":
        return self.nth(0)

    def locator(self, selector: str) -> "FakeLocator":
        found = []
        for element in self.elements:
            found.extend(element.children.get(selector, []))
        return FakeLocator(found)

    def _single(self) -> FakeElement:
        if not self.elements:
            raise PlaywrightError("Timeout 30000ms exceeded waiting for locator")
        return self.elements[0]

    async def inner_text(self) -> str:
        return self._single().text

    async def all_inner_texts(self) -> List[str]:
        return [element.text for element in self.elements]

    async def get_attribute(self, name: str) -> Optional[str]:
        return self._single().attrs.get(name)

    async def click(self, timeout: Optional[float] = None) -> None:
        element = self._single()
        if element.fail_click:
            raise PlaywrightError("Element is not visible")
        element.clicked = True


class FakePage:
    """
    Page whose DOM is a selector -> elements map.

    `texts` backs get_by_text(exact=True); `redirect_to` simulates a
    navigation that lands somewhere else (e.g. the login wall).
    """

    def __init__(self, elements: Optional[Dict[str, List[FakeElement]]] = None,
                 texts: Optional[Dict[str, List[FakeElement]]] = None,
                 redirect_to: Optional[str] = None):
        self.elements = elements or {}
        self.texts = texts or {}
        self.redirect_to = redirect_to
        self.url = "about:blank"
        self.visits: List[str] = []

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self.elements.get(selector, []))

    def get_by_text(self, text: str, exact: bool = False) -> FakeLocator:
        return FakeLocator(self.texts.get(text, []))

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.visits.append(url)
        self.url = self.redirect_to or url


class FakeSurface:
    """Rendering surface over a FakePage that counts leases."""

    def __init__(self, page: Optional[FakePage] = None, available: bool = True):
        self.page = page or FakePage()
        self.available = available
        self.leases: List[SurfaceLease] = []

    @asynccontextmanager
    async def lease(self):
        lease = SurfaceLease(self.page)
        self.leases.append(lease)
        try:
            yield lease
        finally:
            lease.release()


# ----------------------------
# Network, session, timing
# ----------------------------

class FakeHTTPClient:
    """Returns canned FetchResults (or raises canned FetchErrors) per URL."""

    def __init__(self, pages: Optional[Dict[str, object]] = None):
        self.pages = pages or {}
        self.calls: List[tuple] = []

    async def fetch_page(self, url: str, cookie_header: Optional[str] = None) -> FetchResult:
        self.calls.append((url, cookie_header))
        page = self.pages.get(url)
        if page is None:
            raise FetchError(f"HTTP 404 from {url}", url=url, status_code=404)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, str):
            return FetchResult(url=url, status_code=200, html=page)
        return page


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


