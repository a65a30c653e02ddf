# creavely/routers/health.py — Liveness endpoint

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
@router.get("/recipes/health", response_class=PlainTextResponse, include_in_schema=False)
def health() -> str:
    return "OK"
