from fastapi import APIRouter

from api.routes.waitroom import router as waitroom_router

api_router = APIRouter()
# catch-all gate route; register any other router before this one
api_router.include_router(waitroom_router)
