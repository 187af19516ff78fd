"""
Transform Worker
================
Worker-side half of the fetch/transform job. Runs inside a dedicated worker
process so the CPU-bound transform never competes with request handling.

Job Lifecycle (one "fetch" message per worker):
    1. Validate the request into a FetchRequest.
    2. Fetch reports + URL patterns from the warehouse, concurrently.
    3. Run the view's transform pipeline, forwarding each milestone as a
       "verbose" message.
    4. Post exactly one terminal message: "done" with the JSON result, or
       "error" with the stringified failure. Never both, never neither
       (unless the process itself dies, which the dispatcher detects).

The response port is any object with send()/close(), in practice the write
end of a multiprocessing Pipe owned by this one request.
"""
import asyncio
import logging
from typing import Any, Callable, Protocol

from webcompat_triage.pipeline.orchestrator import run_pipeline
from webcompat_triage.services.warehouse import BigQueryWarehouse
from webcompat_triage.worker.protocol import (
    DoneMessage,
    ErrorMessage,
    FetchRequest,
    VerboseMessage,
)

logger = logging.getLogger(__name__)


class ResponsePort(Protocol):
    def send(self, obj: Any) -> None: ...

    def close(self) -> None: ...


WarehouseFactory = Callable[..., Any]


def _post(port: ResponsePort, message) -> None:
    port.send(message.model_dump())


async def handle_message(
    message: dict,
    port: ResponsePort,
    warehouse_factory: WarehouseFactory = BigQueryWarehouse,
) -> None:
    """
    Handle one worker request and post its responses on *port*.

    Parameters
    ----------
    message : dict
        Raw request, expected to be a FetchRequest dump.
    port : ResponsePort
        This request's private response channel.
    warehouse_factory : callable
        Called with the request's project_id; returns an object exposing
        `async fetch_all(view, date_from, date_to)`.
    """
    if message.get("type") != "fetch":
        logger.warning("Ignoring worker message of type %r", message.get("type"))
        return

    def verbose(msg: str) -> None:
        _post(port, VerboseMessage(msg=msg))

    try:
        request = FetchRequest.model_validate(message)

        verbose("Connecting to BigQuery...")
        warehouse = warehouse_factory(request.project_id)

        verbose("Starting queries...")
        raw_reports, raw_url_patterns = await warehouse.fetch_all(
            request.view, request.param_from, request.param_to
        )
        verbose(f"Received {len(raw_reports)} user reports and {len(raw_url_patterns)} URL patterns.")

        result = run_pipeline(
            request.view,
            raw_reports,
            raw_url_patterns,
            prediction=request.param_prediction,
            progress=verbose,
        )
    except Exception as exc:
        logger.error("Transform job failed: %s", exc, exc_info=True)
        _post(port, ErrorMessage(error=f"{type(exc).__name__}: {exc}"))
        return

    _post(port, DoneMessage(result=result))


def run_fetch_job(
    message: dict,
    port: ResponsePort,
    warehouse_factory: WarehouseFactory = BigQueryWarehouse,
) -> None:
    """Worker entry point: run one job to completion, then release the port."""
    try:
        asyncio.run(handle_message(message, port, warehouse_factory))
    finally:
        port.close()
