"""API v1: betting, shortlist, market and insight endpoints."""

from fastapi import APIRouter

from .bets import router as bets_router
from .insights import router as insights_router
from .market_movers import router as market_movers_router
from .meta import router as meta_router
from .races import router as races_router
from .shortlist import router as shortlist_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(bets_router)
router.include_router(shortlist_router)
router.include_router(market_movers_router)
router.include_router(races_router)
router.include_router(insights_router)
router.include_router(meta_router)

api_v1_router = router
