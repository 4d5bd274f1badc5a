from fastapi import APIRouter

from navsite.api.routes import auth, bitables, favicon, health, links, navigation, pending

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/api/auth", tags=["auth"])
api_router.include_router(navigation.router, prefix="/api", tags=["public"])
api_router.include_router(favicon.router, prefix="/api", tags=["public"])
api_router.include_router(links.router, prefix="/api/links", tags=["links"])
api_router.include_router(pending.router, prefix="/api", tags=["review"])
api_router.include_router(bitables.router, prefix="/api/bitables", tags=["tables"])
