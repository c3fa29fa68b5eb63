from fastapi import APIRouter

from sayso import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "ok", "service": "sayso-agent", "version": __version__}
