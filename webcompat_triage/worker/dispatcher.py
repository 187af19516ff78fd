"""
Report Dispatcher
=================
Request-side half of the worker boundary.

For every report request the dispatcher:
    1. Opens a fresh one-way Pipe. Its write end goes to the worker, its read
       end stays here, so a response can only ever reach the request that
       asked for it, however many requests are in flight.
    2. Spawns one transform worker (a "spawn"-context process by default)
       running run_fetch_job().
    3. Reads messages off the pipe in a thread, keeping the event loop free:
       "verbose" → logged, "done" → returned, "error" → WorkerError.
    4. Raises WorkerError if the worker exits without a terminal message.

No cancellation: if the HTTP request is abandoned the worker still finishes
its job and the result is dropped with the pipe.
"""
import asyncio
import logging
import multiprocessing
from typing import Callable, Optional

from webcompat_triage.core.config import BQ_PROJECT_ID, WORKER_POLL_INTERVAL
from webcompat_triage.core.constants import ReportView
from webcompat_triage.services.warehouse import BigQueryWarehouse
from webcompat_triage.worker.protocol import (
    ErrorMessage,
    FetchRequest,
    is_terminal,
    parse_response,
)
from webcompat_triage.worker.transform_worker import WarehouseFactory, run_fetch_job

logger = logging.getLogger(__name__)

_SPAWN_CONTEXT = multiprocessing.get_context("spawn")


class WorkerError(Exception):
    """A transform worker reported a failure or died without answering."""


class ReportDispatcher:
    """
    Runs fetch/transform jobs in isolated workers.

    Parameters
    ----------
    process_factory : callable
        Anything with the multiprocessing.Process signature
        (target=, args=, daemon=) returning a start()/join()/is_alive()
        object. threading.Thread fits, which is how tests run jobs in-process.
    warehouse_factory : callable
        Passed through to the worker; must be picklable when workers are
        real processes.
    project_id : str, optional
        BigQuery project forwarded in every request.
    poll_interval : float
        Seconds between worker liveness checks while waiting for messages.
    """

    def __init__(
        self,
        process_factory: Callable = _SPAWN_CONTEXT.Process,
        warehouse_factory: WarehouseFactory = BigQueryWarehouse,
        project_id: Optional[str] = BQ_PROJECT_ID,
        poll_interval: float = WORKER_POLL_INTERVAL,
    ) -> None:
        self.process_factory = process_factory
        self.warehouse_factory = warehouse_factory
        self.project_id = project_id
        self.poll_interval = poll_interval

    async def dispatch(
        self,
        view: ReportView,
        param_from: str,
        param_to: str,
        param_prediction: Optional[str] = None,
        request_logger: Optional[logging.Logger] = None,
    ) -> str:
        """
        Run one job and return its serialized view model.

        Raises
        ------
        WorkerError
            If the worker posts an "error" message or exits without a result.
        """
        log = request_logger or logger
        request = FetchRequest(
            view=view,
            project_id=self.project_id,
            param_from=param_from,
            param_to=param_to,
            param_prediction=param_prediction,
        )

        receiver, sender = _SPAWN_CONTEXT.Pipe(duplex=False)
        worker = self.process_factory(
            target=run_fetch_job,
            args=(request.model_dump(mode="json"), sender, self.warehouse_factory),
            daemon=True,
        )
        worker.start()
        log.debug("Started transform worker for %s", request.view.value)

        try:
            while True:
                raw = await asyncio.to_thread(self._receive, receiver, worker)
                message = parse_response(raw)
                if not is_terminal(message):
                    log.info("[worker] %s", message.msg)
                    continue
                if isinstance(message, ErrorMessage):
                    raise WorkerError(message.error)
                log.info("Transform worker finished for %s", request.view.value)
                return message.result
        finally:
            receiver.close()
            await asyncio.to_thread(worker.join, self.poll_interval * 4)
            sender.close()

    def _receive(self, receiver, worker) -> dict:
        """Block until a message arrives, or fail once the worker is gone."""
        while True:
            if receiver.poll(self.poll_interval):
                try:
                    return receiver.recv()
                except EOFError:
                    raise WorkerError("Transform worker closed its channel without a result")
            if not worker.is_alive():
                # A message may have landed between the poll and the liveness check
                if receiver.poll():
                    try:
                        return receiver.recv()
                    except EOFError:
                        pass
                raise WorkerError("Transform worker exited without a result")
