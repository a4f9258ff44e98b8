from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(request: Request):
    settings = request.app.state.settings
    return {"status": "ok", "version": settings.version}
