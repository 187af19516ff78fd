"""
Worker Protocol
===============
Typed messages exchanged between the request handler and a transform worker.

Request (handler → worker, once):
    {"type": "fetch", "view", "project_id", "param_from", "param_to", "param_prediction"}

Responses (worker → handler, on the request's own pipe):
    {"type": "verbose", "msg"}     — zero or more progress milestones
    {"type": "done", "result"}     — exactly one of these two terminals;
    {"type": "error", "error"}       result is the serialized view model

Messages cross the process boundary as plain dicts (model_dump()); parse
them back with parse_response().
"""
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from webcompat_triage.core.constants import ReportView


class FetchRequest(BaseModel):
    type: Literal["fetch"] = "fetch"
    view: ReportView
    project_id: Optional[str] = None
    param_from: str
    param_to: str
    param_prediction: Optional[str] = None


class VerboseMessage(BaseModel):
    type: Literal["verbose"] = "verbose"
    msg: str


class DoneMessage(BaseModel):
    type: Literal["done"] = "done"
    result: str


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    error: str


WorkerResponse = Union[VerboseMessage, DoneMessage, ErrorMessage]

_RESPONSE_ADAPTER = TypeAdapter(
    Annotated[WorkerResponse, Field(discriminator="type")]
)


def parse_response(payload: dict) -> WorkerResponse:
    """Validate a raw dict received from a worker into its message model."""
    return _RESPONSE_ADAPTER.validate_python(payload)


def is_terminal(message: WorkerResponse) -> bool:
    return isinstance(message, (DoneMessage, ErrorMessage))
