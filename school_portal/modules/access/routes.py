from fastapi import APIRouter, Depends
from school_portal.config.access_config import TILES
from school_portal.core.dependencies import get_auth_context
from school_portal.modules.access.schemas import AccessResponse, DashboardResponse, TileResponse
from school_portal.modules.access.service import AuthContext
from school_portal.modules.access.tiles import visible_tiles

router = APIRouter(prefix="/access", tags=["access"])


@router.get("/me", response_model=AccessResponse)
async def get_my_access(context: AuthContext = Depends(get_auth_context)):
    """Approved role and granted permissions of the caller"""
    return AccessResponse(
        user_id=context.user_id,
        email=context.email,
        role=context.role,
        permissions=sorted(context.permissions),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(context: AuthContext = Depends(get_auth_context)):
    """Dashboard tiles the caller may open"""
    tiles = visible_tiles(TILES, context.role, context.permissions)
    return DashboardResponse(
        role=context.role,
        tiles=[TileResponse.from_tile(tile) for tile in tiles],
    )
