from pydantic import BaseModel
from typing import Optional, List

from school_portal.config.access_config import Role, Tile


class AccessResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[Role] = None
    permissions: List[str]


class TileResponse(BaseModel):
    key: str
    title: str
    description: str
    href: str
    allowed_roles: List[Role]
    required_permission: str

    @classmethod
    def from_tile(cls, tile: Tile) -> "TileResponse":
        return cls(
            key=tile.key,
            title=tile.title,
            description=tile.description,
            href=tile.href,
            allowed_roles=list(tile.allowed_roles),
            required_permission=tile.required_permission,
        )


class DashboardResponse(BaseModel):
    role: Optional[Role] = None
    tiles: List[TileResponse]
