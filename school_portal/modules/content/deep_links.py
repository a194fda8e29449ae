import re
from dataclasses import dataclass
from typing import Optional

_DETAIL_FRAGMENT = re.compile(r"^#?(news|activity)-detail-(.+)$")


@dataclass(frozen=True)
class DetailLink:
    kind: str
    item_id: str


def parse_detail_fragment(fragment: Optional[str]) -> Optional[DetailLink]:
    """'#news-detail-<id>' / '#activity-detail-<id>' -> DetailLink, anything else -> None"""
    if not fragment:
        return None
    match = _DETAIL_FRAGMENT.match(fragment.strip())
    if not match:
        return None
    return DetailLink(kind=match.group(1), item_id=match.group(2))
