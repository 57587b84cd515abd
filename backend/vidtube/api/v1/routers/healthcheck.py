# vidtube/api/v1/routers/healthcheck.py
from fastapi import APIRouter

from vidtube.core.responses import api_response

router = APIRouter(prefix="/healthcheck", tags=["healthcheck"])


@router.get("")
async def healthcheck():
    return api_response({"status": "OK"}, "Health check passed")
