"""BigQuery-backed identity store.

Holds one row per captured (quote, order) → (client, session) pair.
Auto-creates the target table if it does not exist. Reads pick the first
row matching either key column; any client failure surfaces as
``IdentityStoreUnavailable``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from serverside_analytics.events import IdentityRecord
from serverside_analytics.identity import IdentityStoreUnavailable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# BigQuery schema
# ---------------------------------------------------------------------------

BQ_SCHEMA_FIELDS = [
    ("quote_id", "STRING", "NULLABLE"),
    ("order_id", "STRING", "NULLABLE"),
    ("client_id", "STRING", "NULLABLE"),
    ("session_id", "STRING", "NULLABLE"),
    ("created_at", "TIMESTAMP", "REQUIRED"),
]


DDL_TEMPLATE = """
CREATE TABLE IF NOT EXISTS `{project}.{dataset}.{table}` (
{columns}
)
PARTITION BY DATE(created_at)
CLUSTER BY quote_id, order_id
OPTIONS(
  description = 'Analytics client/session ids captured per quote and order',
  labels = [('managed_by', 'serverside_analytics')]
);
"""

LOOKUP_QUERY = """
SELECT client_id, session_id, quote_id, order_id
FROM `{table}`
WHERE quote_id = @correlation_id OR order_id = @correlation_id
ORDER BY created_at
LIMIT 1
"""


def get_ddl(project: str, dataset: str, table: str) -> str:
    """Return the CREATE TABLE DDL for manual execution."""
    col_lines = []
    for name, bq_type, mode in BQ_SCHEMA_FIELDS:
        not_null = " NOT NULL" if mode == "REQUIRED" else ""
        col_lines.append(f"  {name} {bq_type}{not_null}")
    columns = ",\n".join(col_lines)
    return DDL_TEMPLATE.format(
        project=project, dataset=dataset, table=table, columns=columns
    )


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class BigQueryIdentityStore:
    """Identity store on a BigQuery table."""

    def __init__(
        self,
        project_id: str,
        dataset_id: str = "serverside_analytics",
        table_id: str = "sales_order_identity",
        *,
        auto_create_table: bool = True,
    ):
        self.project_id = project_id
        self.dataset_id = dataset_id
        self.table_id = table_id
        self.auto_create_table = auto_create_table

        self._client = None
        self._table_ensured = False

    @property
    def full_table_id(self) -> str:
        return f"{self.project_id}.{self.dataset_id}.{self.table_id}"

    # -- lazy init --

    def _get_client(self):
        if self._client is None:
            from google.cloud import bigquery

            self._client = bigquery.Client(project=self.project_id)
        return self._client

    def _ensure_table(self):
        if self._table_ensured or not self.auto_create_table:
            return
        from google.cloud import bigquery

        client = self._get_client()
        ds_ref = bigquery.DatasetReference(self.project_id, self.dataset_id)
        client.create_dataset(bigquery.Dataset(ds_ref), exists_ok=True)

        schema = [
            bigquery.SchemaField(name, bq_type, mode=mode)
            for name, bq_type, mode in BQ_SCHEMA_FIELDS
        ]
        tbl_ref = bigquery.TableReference(ds_ref, self.table_id)
        table = bigquery.Table(tbl_ref, schema=schema)
        table.time_partitioning = bigquery.TimePartitioning(field="created_at")
        table.clustering_fields = ["quote_id", "order_id"]
        client.create_table(table, exists_ok=True)
        self._table_ensured = True
        logger.info("Ensured table %s", self.full_table_id)

    # -- public API --

    def find_first(self, correlation_id: str) -> Optional[IdentityRecord]:
        from google.cloud import bigquery

        job_config = bigquery.QueryJobConfig(
            query_parameters=[
                bigquery.ScalarQueryParameter(
                    "correlation_id", "STRING", str(correlation_id)
                )
            ]
        )
        try:
            client = self._get_client()
            rows = list(
                client.query(
                    LOOKUP_QUERY.format(table=self.full_table_id),
                    job_config=job_config,
                ).result()
            )
        except Exception as exc:
            raise IdentityStoreUnavailable(
                f"Identity lookup failed on {self.full_table_id}"
            ) from exc

        if not rows:
            return None
        row = rows[0]
        return IdentityRecord(
            client_id=row["client_id"],
            session_id=row["session_id"],
            quote_id=row["quote_id"],
            order_id=row["order_id"],
        )

    def save(self, record: IdentityRecord) -> None:
        row = {
            "quote_id": record.quote_id,
            "order_id": record.order_id,
            "client_id": record.client_id,
            "session_id": record.session_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._ensure_table()
            errors = self._get_client().insert_rows_json(self.full_table_id, [row])
        except Exception as exc:
            raise IdentityStoreUnavailable(
                f"Identity insert failed on {self.full_table_id}"
            ) from exc
        if errors:
            raise IdentityStoreUnavailable(f"BQ insert errors: {errors[:3]}")
        logger.debug(
            "Stored identity for quote=%s order=%s", record.quote_id, record.order_id
        )

    def close(self):
        if self._client:
            self._client.close()
            self._client = None
