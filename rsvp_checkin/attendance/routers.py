from fastapi import APIRouter

from .features.check_in.router import router as check_in_router
from .features.list_records.router import router as list_records_router
from .features.register.router import router as register_router
from .features.stats.router import router as stats_router
from .features.verify_guest.router import router as verify_guest_router
from .features.verify_token.router import router as verify_token_router

router = APIRouter()

router.include_router(register_router)
router.include_router(verify_guest_router)
router.include_router(check_in_router)
router.include_router(stats_router)
router.include_router(list_records_router)
router.include_router(verify_token_router)
