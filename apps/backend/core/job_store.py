"""
Job store access for enrichment write-back.

Only the enrichment columns of the jobs table are ever touched:
description, salary, seniority_level, job_type, num_applicants, easy_apply,
status and updated_at.
"""
import os
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pipeline.errors import JobStoreError
from pipeline.outcomes import ExtractionResult, JobRecord, JobStatus

logger = logging.getLogger(__name__)

DEFAULT_JOBS_TABLE = os.getenv('JOBS_TABLE', 'jobs')
CONNECT_RETRIES = 3

# ExtractionResult field -> jobs column
ENRICHMENT_COLUMNS = {
    'description': 'description',
    'salary': 'salary',
    'seniority_level': 'seniority_level',
    'job_type': 'job_type',
    'num_applicants': 'num_applicants',
    'easy_apply': 'easy_apply',
}


class JobStore(ABC):
    """Persistence boundary of the enrichment pipeline."""

    @abstractmethod
    def get_job(self, job_id: Any) -> Optional[JobRecord]:
        """Return the stored job, or None if the id is unknown."""

    @abstractmethod
    def save_enrichment(self, job_id: Any, result: ExtractionResult) -> None:
        """
        Persist a successful enrichment.

        Non-null fields overwrite; null fields keep the stored value. Status
        becomes no_response and updated_at is refreshed.
        """

    @abstractmethod
    def mark_failed(self, job_id: Any) -> None:
        """Set status to enrichment_failed and refresh updated_at."""


class PostgresJobStore(JobStore):
    """JobStore over a PostgreSQL jobs table."""

    def __init__(self, db_url: str, jobs_table: Optional[str] = None):
        """
        Args:
            db_url: PostgreSQL connection string
            jobs_table: Table name (default: JOBS_TABLE env var or 'jobs')
        """
        self.db_url = db_url
        self.jobs_table = jobs_table or DEFAULT_JOBS_TABLE
        logger.info(f"[job_store] PostgresJobStore initialized: table={self.jobs_table}")

    @retry(
        stop=stop_after_attempt(CONNECT_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(psycopg2.OperationalError),
        reraise=True
    )
    def _get_db_conn(self):
        """Get database connection, retrying transient connection failures."""
        try:
            return psycopg2.connect(self.db_url, connect_timeout=5)
        except psycopg2.OperationalError as e:
            logger.warning(f"[job_store] Failed to connect to database: {e}")
            raise

    def _connect(self):
        try:
            return self._get_db_conn()
        except psycopg2.Error as e:
            raise JobStoreError(f"database connection failed: {e}") from e

    def get_job(self, job_id: Any) -> Optional[JobRecord]:
        conn = self._connect()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                cursor.execute(
                    f"""
                    SELECT id, url, status, title, company, description, salary, job_type,
                           seniority_level, num_applicants, easy_apply, updated_at
                    FROM {self.jobs_table}
                    WHERE id = %s
                    """,
                    (job_id,)
                )
                row = cursor.fetchone()
        except psycopg2.Error as e:
            raise JobStoreError(f"failed to load job {job_id}: {e}") from e
        finally:
            conn.close()

        if row is None:
            return None
        return JobRecord(**dict(row))

    def save_enrichment(self, job_id: Any, result: ExtractionResult) -> None:
        assignments = []
        params = []
        for field_name, column in ENRICHMENT_COLUMNS.items():
            value = getattr(result, field_name)
            if value is None:
                continue
            assignments.append(f"{column} = %s")
            params.append(value)

        assignments.append("status = %s")
        params.append(JobStatus.NO_RESPONSE.value)
        assignments.append("updated_at = NOW()")
        params.append(job_id)

        self._execute_update(
            f"UPDATE {self.jobs_table} SET {', '.join(assignments)} WHERE id = %s",
            params,
            job_id,
        )
        logger.info(f"[job_store] job {job_id}: saved enrichment ({', '.join(a.split(' =')[0] for a in assignments)})")

    def mark_failed(self, job_id: Any) -> None:
        self._execute_update(
            f"UPDATE {self.jobs_table} SET status = %s, updated_at = NOW() WHERE id = %s",
            [JobStatus.ENRICHMENT_FAILED.value, job_id],
            job_id,
        )
        logger.info(f"[job_store] job {job_id}: marked {JobStatus.ENRICHMENT_FAILED.value}")

    def _execute_update(self, sql: str, params: list, job_id: Any) -> None:
        conn = self._connect()
        try:
            with conn.cursor() as cursor:
                cursor.execute(sql, params)
            conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"[job_store] job {job_id}: update failed: {e}")
            raise JobStoreError(f"failed to update job {job_id}: {e}") from e
        finally:
            conn.close()
