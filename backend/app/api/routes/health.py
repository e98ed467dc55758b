from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_class=PlainTextResponse)
def health():
    return "OK"


@router.get("/metrics", response_class=PlainTextResponse)
def metrics(request: Request):
    return PlainTextResponse(
        request.app.state.metrics.render_prometheus(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
