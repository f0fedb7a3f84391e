from fastapi import APIRouter

from storefront_pricing.api.v1 import summary

api_router = APIRouter()

api_router.include_router(summary.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
