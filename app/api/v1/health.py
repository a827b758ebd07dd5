from fastapi import APIRouter

from app.core.config.heuristics import canonical_section_order, zoom_levels

router = APIRouter()

@router.get("/health", summary="Health Check", description="Check the health status of the critique service.")
async def health_check():
    return {
        "status": "healthy",
        "sections": canonical_section_order(),
        "zoom_levels": list(zoom_levels()),
    }
