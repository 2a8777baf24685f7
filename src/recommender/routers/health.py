from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    engine: str


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck(request: Request):
    # Liveness only: the engine is reported but Elasticsearch is not pinged.
    engine = getattr(request.app.state, "engine", None)
    return {"status": "ok", "engine": "ready" if engine is not None else "unavailable"}
