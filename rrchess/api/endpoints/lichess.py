from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from rrchess.api.dependencies import get_lichess_client
from rrchess.services.lichess_service import LichessClient

router = APIRouter()


@router.get("/autocomplete", response_model=Dict[str, Any], summary="Search Lichess players")
async def autocomplete_endpoint(
    term: str = Query("", description="Beginning of a Lichess username, at least 2 characters"),
    lichess_client: LichessClient = Depends(get_lichess_client),
):
    return {"result": await lichess_client.autocomplete_players(term)}
