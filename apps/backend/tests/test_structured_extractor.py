"""
Unit tests for tier 1 extraction (JSON-LD, server-rendered selectors, header fields).
"""

import json

import pytest
from bs4 import BeautifulSoup

from pipeline.extractor import StructuredExtractor
from pipeline.heuristics import HeuristicExtractor
from pipeline.jsonld import JSONLDExtractor
from pipeline.outcomes import SourceStrategy
from pipeline.text import html_to_text, parse_count

LONG_BODY = (
    "We are looking for a backend engineer to design, build and operate the services "
    "behind our marketplace. You will own APIs end to end and work closely with product."
)


def jsonld_page(payload) -> str:
    return (
        '<html><head><title>Backend Engineer | Acme</title>'
        f'<script type="application/ld+json">{json.dumps(payload)}</script>'
        '</head><body></body></html>'
    )


class TestJSONLDExtractor:
    """JobPosting JSON-LD parsing."""

    def test_extract_job_posting(self):
        html = jsonld_page({
            "@context": "https://schema.org",
            "@type": "JobPosting",
            "title": "Backend Engineer",
            "description": f"<p>{LONG_BODY}</p><ul><li>Python</li><li>PostgreSQL</li></ul>",
            "employmentType": "FULL_TIME",
            "baseSalary": {
                "@type": "MonetaryAmount",
                "currency": "USD",
                "value": {"@type": "QuantitativeValue", "minValue": 120000, "maxValue": 150000.0},
            },
        })
        result = JSONLDExtractor().extract(BeautifulSoup(html, 'lxml'))

        assert result is not None
        assert result.description.startswith("We are looking for a backend engineer")
        assert "Python\nPostgreSQL" in result.description
        assert "<p>" not in result.description
        assert result.salary == "120000–150000 USD"
        assert result.job_type == "FULL_TIME"
        assert result.source_strategy == SourceStrategy.JSON_LD

    def test_graph_and_list_employment_type(self):
        html = jsonld_page({
            "@graph": [
                {"@type": "Organization", "name": "Acme"},
                {"@type": "JobPosting", "description": LONG_BODY,
                 "employmentType": ["FULL_TIME", "CONTRACTOR"]},
            ]
        })
        result = JSONLDExtractor().extract(BeautifulSoup(html, 'lxml'))

        assert result.description == LONG_BODY
        assert result.job_type == "FULL_TIME, CONTRACTOR"
        assert result.salary is None

    def test_escaped_markup_is_unescaped(self):
        html = jsonld_page({"@type": "JobPosting", "description": "&lt;p&gt;Build things&lt;/p&gt;"})
        result = JSONLDExtractor().extract(BeautifulSoup(html, 'lxml'))
        assert result.description == "Build things"

    def test_malformed_block_skipped(self):
        html = (
            '<script type="application/ld+json">{not json</script>'
            f'<script type="application/ld+json">{json.dumps({"@type": "JobPosting", "description": "Valid"})}</script>'
        )
        result = JSONLDExtractor().extract(BeautifulSoup(html, 'lxml'))
        assert result.description == "Valid"

    def test_posting_without_description(self):
        html = jsonld_page({"@type": "JobPosting", "title": "Engineer"})
        assert JSONLDExtractor().extract(BeautifulSoup(html, 'lxml')) is None

    def test_single_salary_value(self):
        html = jsonld_page({
            "@type": "JobPosting", "description": "x",
            "baseSalary": {"currency": "EUR", "value": {"value": 55000}},
        })
        result = JSONLDExtractor().extract(BeautifulSoup(html, 'lxml'))
        assert result.salary == "55000 EUR"


class TestHeuristicExtractor:
    """Server-rendered selector and header-field scans."""

    def test_description_selector_priority(self):
        html = f"""
        <div class="description__text">{LONG_BODY} (secondary)</div>
        <div class="show-more-less-html__markup"><p>{LONG_BODY}</p></div>
        """
        found = HeuristicExtractor().extract_description(BeautifulSoup(html, 'lxml'))
        assert found == (LONG_BODY, '.show-more-less-html__markup')

    def test_short_match_rejected(self):
        html = f"""
        <div class="show-more-less-html__markup">Show more</div>
        <div id="job-details">{LONG_BODY}</div>
        """
        text, selector = HeuristicExtractor().extract_description(BeautifulSoup(html, 'lxml'))
        assert selector == '#job-details'

    def test_no_description(self):
        assert HeuristicExtractor().extract_description(BeautifulSoup("<p>hi</p>", 'lxml')) is None

    def test_header_fields_from_criteria_list(self):
        html = """
        <ul class="description__job-criteria-list">
          <li class="description__job-criteria-item">
            <h3 class="description__job-criteria-subheader">Seniority level</h3>
            <span class="description__job-criteria-text">
              Mid-Senior level
            </span>
          </li>
          <li class="description__job-criteria-item">
            <h3 class="description__job-criteria-subheader">Employment type</h3>
            <span class="description__job-criteria-text">Full-time</span>
          </li>
        </ul>
        <span class="num-applicants__caption">Over 200 applicants</span>
        <div class="compensation__salary-range">$120,000/yr - $150,000/yr</div>
        """
        header = HeuristicExtractor().extract_header_fields(BeautifulSoup(html, 'lxml'))

        assert header.seniority_level == "Mid-Senior level"
        assert header.job_type == "Full-time"
        assert header.num_applicants == 200
        assert header.salary == "$120,000/yr - $150,000/yr"
        assert header.easy_apply is None

    def test_easy_apply_indicator(self):
        html = '<button class="jobs-apply-button easy-apply-button">Easy Apply</button>'
        header = HeuristicExtractor().extract_header_fields(BeautifulSoup(html, 'lxml'))
        assert header.easy_apply is True


class TestStructuredExtractor:
    """Tier 1 coordination."""

    def test_jsonld_wins_and_header_fills_gaps(self):
        html = jsonld_page({"@type": "JobPosting", "description": LONG_BODY}).replace(
            "<body></body>",
            '<body><div class="show-more-less-html__markup">Other text that should lose</div>'
            '<span class="num-applicant-count">57 applicants</span></body>',
        )
        result = StructuredExtractor().extract(html, job_id=1)

        assert result.description == LONG_BODY
        assert result.source_strategy == SourceStrategy.JSON_LD
        assert result.num_applicants == 57

    def test_ssr_selector_fallback(self):
        html = f'<html><body><div id="job-details"><p>{LONG_BODY}</p></div></body></html>'
        result = StructuredExtractor().extract(html)

        assert result.description == LONG_BODY
        assert result.source_strategy == SourceStrategy.SSR_SELECTOR

    def test_nothing_found(self):
        result = StructuredExtractor().extract("<html><body><h1>Engineer</h1></body></html>")
        assert not result.has_description()
        assert result.source_strategy is None


class TestTextHelpers:
    """Markup stripping and count parsing."""

    def test_inline_tags_stay_on_one_line(self):
        assert html_to_text("<p>Work with <b>Python</b> daily</p><p>Remote</p>") == "Work with Python daily\nRemote"

    @pytest.mark.parametrize("text,expected", [
        ("Over 200 applicants", 200),
        ("1,024 applicants", 1024),
        ("Be among the first applicants", None),
        (None, None),
    ])
    def test_parse_count(self, text, expected):
        assert parse_count(text) == expected
