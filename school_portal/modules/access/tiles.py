from typing import Iterable, List, Optional

from school_portal.config.access_config import Role, Tile


def visible_tiles(tiles: Iterable[Tile], role: Optional[Role], permissions: Iterable[str]) -> List[Tile]:
    """
    Admins see every tile. Everyone else sees a tile only when its required
    permission is granted; Tile.allowed_roles is descriptive and not checked here.
    """
    tiles = list(tiles)
    if role == Role.ADMIN:
        return tiles
    granted = set(permissions)
    return [tile for tile in tiles if tile.required_permission in granted]
