from __future__ import annotations

import os
from datetime import datetime, timedelta
from textwrap import dedent

from airflow import DAG
from airflow.providers.docker.operators.docker import DockerOperator
from docker.types import Mount

DEFAULT_ARGS = {
    "owner": "data-platform",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 1,
    "retry_delay": timedelta(minutes=10),
}

COMPOSE_PROJECT = os.environ.get("COMPOSE_PROJECT_NAME", "presidential-term-indicators")
DOCKER_NETWORK = f"{COMPOSE_PROJECT}_default"
API_IMAGE = os.environ.get("API_IMAGE", "presidential-term-indicators-api:latest")
DATA_MOUNT = Mount(target="/app/data", source="sheet_cache_data", type="volume")

ENV_KEYS = [
    "GOOGLE_SPREADSHEET_ID",
    "GOOGLE_CLIENT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "SHEET_TERMS_TITLE",
    "SHEET_SUMMARY_TITLE",
    "SHEET_HISTORY_TITLE",
    "SHEET_CACHE_TTL_SECONDS",
    "SHEET_CACHE_DB_PATH",
]

ENVIRONMENT = {key: value for key in ENV_KEYS if (value := os.environ.get(key))}

QUALITY_CHECK_SCRIPT = dedent(
    """
from jobs.config import load_sheet_tables
from storage.db import cached_row_counts, connect

tables = load_sheet_tables()
conn = connect(read_only=True)
counts = cached_row_counts(conn)
conn.close()

for name in tables.required:
    assert counts.get(name, 0) > 0, f"No cached rows for {name}"
assert counts[tables.terms] >= 1, "Expected at least one presidential term"
assert counts[tables.history] >= counts[tables.summary], "History shorter than summary"
print(counts)
    """
).strip()

with DAG(
    dag_id="refresh_sheet_cache_daily",
    description="Refetch the spreadsheet tables into the DuckDB cache and sanity-check them",
    schedule="0 6 * * *",
    start_date=datetime(2023, 1, 1),
    catchup=False,
    default_args=DEFAULT_ARGS,
    max_active_runs=1,
    tags=["presidential-terms", "cache"],
) as dag:

    refresh_cache = DockerOperator(
        task_id="refresh_sheet_cache",
        image=API_IMAGE,
        command=["python", "-m", "jobs", "refresh-cache"],
        docker_url="unix://var/run/docker.sock",
        auto_remove=True,
        network_mode=DOCKER_NETWORK,
        environment=ENVIRONMENT,
        mounts=[DATA_MOUNT],
        mount_tmp_dir=False,
        do_xcom_push=False,
    )

    data_quality_checks = DockerOperator(
        task_id="data_quality_checks",
        image=API_IMAGE,
        command=["python", "-c", QUALITY_CHECK_SCRIPT],
        docker_url="unix://var/run/docker.sock",
        auto_remove=True,
        network_mode=DOCKER_NETWORK,
        environment=ENVIRONMENT,
        mounts=[DATA_MOUNT],
        mount_tmp_dir=False,
        do_xcom_push=False,
    )

    refresh_cache >> data_quality_checks
