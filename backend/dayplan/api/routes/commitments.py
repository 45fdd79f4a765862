"""Free-text commitment parsing API routes."""
from __future__ import annotations

from fastapi import APIRouter, Request

from dayplan.api.schemas.commitments import ParseTextRequest, ParseTextResponse
from dayplan.observability.metrics import log_metric
from dayplan.observability.tracing import annotate, trace
from dayplan.services.commitment_parser import parse_text_input

router = APIRouter()


@router.post("/commitments/parse", response_model=ParseTextResponse, tags=["commitments"])
def parse_commitments(request: ParseTextRequest, http_request: Request) -> ParseTextResponse:
    """Extract fixed events such as ``Work 9-5; Lunch 12-1`` from free text."""
    request_id = getattr(http_request.state, "request_id", None) or ""
    metadata = {"route": "/commitments/parse", "text_length": len(request.text)}

    with trace("commitments.parse", metadata=metadata, request_id=request_id) as span:
        parsed = parse_text_input(request.text)
        unparsed_segments = len(parsed.unparsed_text.splitlines())
        annotate(span, {**metadata, "items": len(parsed.items), "unparsed": unparsed_segments})
        log_metric("commitments.parse.items", len(parsed.items))
        log_metric("commitments.parse.unparsed", unparsed_segments)

    return ParseTextResponse(items=parsed.items, unparsed_text=parsed.unparsed_text, request_id=request_id)
