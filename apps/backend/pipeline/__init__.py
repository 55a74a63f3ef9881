"""
Job posting enrichment pipeline.

Fills in descriptions and header fields for stored LinkedIn job postings,
using server-rendered markup first and a rendered browser page as fallback.
"""

__version__ = "1.0.0"
