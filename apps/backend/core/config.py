"""
Enrichment configuration.

All delays, settle periods and length thresholds the pipeline uses live here
so they can be tuned per deployment and zeroed in tests.
"""
import os
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic/claude-3-haiku"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[config] Invalid {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class EnrichmentConfig:
    """
    Tunables for one enrichment run.

    Attributes:
        max_batch_size: Largest accepted batch; larger batches are rejected pre-flight
        fetch_timeout_s: Hard timeout for the server-side page fetch
        fast_delay_s: Pause after a job enriched from server-rendered HTML
        slow_delay_min_s: Lower bound of the randomized pause after any other job
        slow_delay_max_s: Upper bound of the randomized pause
        render_settle_s: Wait after browser navigation for the client app to render
        expand_settle_s: Wait after clicking a "show more" control
        min_ssr_length: Shortest accepted description from a server-rendered selector
        min_section_length: Shortest accepted heading-anchored section
        noise_min_offset: Noise markers before this offset are ignored
        min_selector_length: Shortest accepted text from a broad DOM selector
        min_selector_line_breaks: Line breaks a broad DOM selector match must contain
        header_max_length: Header field values longer than this are ignored
        cleanup_min_length: Descriptions at or under this length skip model cleanup
        cleanup_max_input: Characters of raw description sent to the model
        cleanup_model: OpenRouter model id used for cleanup
        browser_headless: Launch the rendering browser headless
    """
    max_batch_size: int = 10
    fetch_timeout_s: float = 15.0
    fast_delay_s: float = 0.5
    slow_delay_min_s: float = 2.0
    slow_delay_max_s: float = 15.0
    render_settle_s: float = 3.5
    expand_settle_s: float = 1.5
    min_ssr_length: int = 100
    min_section_length: int = 100
    noise_min_offset: int = 100
    min_selector_length: int = 150
    min_selector_line_breaks: int = 3
    header_max_length: int = 300
    cleanup_min_length: int = 200
    cleanup_max_input: int = 8000
    cleanup_model: str = DEFAULT_MODEL
    browser_headless: bool = True

    @classmethod
    def from_env(cls) -> "EnrichmentConfig":
        config = cls(
            max_batch_size=_env_int('ENRICH_MAX_BATCH', cls.max_batch_size),
            fetch_timeout_s=_env_float('ENRICH_FETCH_TIMEOUT_S', cls.fetch_timeout_s),
            fast_delay_s=_env_float('ENRICH_FAST_DELAY_S', cls.fast_delay_s),
            slow_delay_min_s=_env_float('ENRICH_SLOW_DELAY_MIN_S', cls.slow_delay_min_s),
            slow_delay_max_s=_env_float('ENRICH_SLOW_DELAY_MAX_S', cls.slow_delay_max_s),
            render_settle_s=_env_float('ENRICH_RENDER_SETTLE_S', cls.render_settle_s),
            expand_settle_s=_env_float('ENRICH_EXPAND_SETTLE_S', cls.expand_settle_s),
            cleanup_min_length=_env_int('ENRICH_CLEANUP_MIN_LENGTH', cls.cleanup_min_length),
            cleanup_model=os.getenv('OPENROUTER_MODEL') or cls.cleanup_model,
            browser_headless=os.getenv('ENRICH_BROWSER_HEADLESS', 'true').lower() == 'true',
        )
        if config.slow_delay_max_s < config.slow_delay_min_s:
            raise ValueError(
                f"ENRICH_SLOW_DELAY_MAX_S ({config.slow_delay_max_s}) must be >= "
                f"ENRICH_SLOW_DELAY_MIN_S ({config.slow_delay_min_s})"
            )

        logger.info(
            f"[config] EnrichmentConfig: max_batch={config.max_batch_size}, "
            f"timeout={config.fetch_timeout_s}s, delays={config.fast_delay_s}s/"
            f"{config.slow_delay_min_s}-{config.slow_delay_max_s}s, "
            f"settle={config.render_settle_s}s/{config.expand_settle_s}s, "
            f"model={config.cleanup_model}, headless={config.browser_headless}"
        )
        return config
