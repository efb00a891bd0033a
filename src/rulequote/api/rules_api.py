"""
Rules API - inspect and reload the active tier rules.
"""
import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..rules import RulesConfigError
from .state import AppState, get_state

router = APIRouter(prefix="/api/rules", tags=["rules"])

logger = structlog.get_logger(__name__)


@router.get("")
async def get_rules(state: AppState = Depends(get_state)):
    """Current rules configuration."""
    return state.rules_store.current().to_dict()


@router.post("/reload")
async def reload_rules(state: AppState = Depends(get_state)):
    """
    Re-read the rules table and swap it in.

    On a bad table the previous rules stay active and a 400 is returned.
    """
    try:
        config = state.rules_store.reload()
    except RulesConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("rules_reloaded", path=str(state.settings.rules_csv))
    return {"success": True, "rules": config.to_dict()}
