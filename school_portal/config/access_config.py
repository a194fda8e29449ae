"""
Roles, permissions and dashboard tiles
This config defines the closed set of roles, the permission catalog the admin
permission matrix edits, and the static catalog of dashboard tiles.
Used by the access lookups, the admin editor and the grant_admin script.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"
    GUARDIAN = "guardian"
    ADMIN = "admin"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"


ROLE_LABELS: Dict[Role, str] = {
    Role.TEACHER: "ครู",
    Role.STUDENT: "นักเรียน",
    Role.GUARDIAN: "ผู้ปกครอง",
    Role.ADMIN: "ผู้ดูแลระบบ",
}

# Status column of the CSV role import; admin is never importable
CSV_STATUS_ROLES: Dict[str, Role] = {
    "ครู": Role.TEACHER,
    "นักเรียน": Role.STUDENT,
    "ผู้ปกครอง": Role.GUARDIAN,
}

# Content permissions, edited per user in the admin permission matrix
CONTENT_PERMISSIONS: Dict[str, str] = {
    "view_news": "ดูข่าวสาร",
    "create_news": "สร้างข่าวสาร",
    "edit_news": "แก้ไขข่าวสาร",
    "delete_news": "ลบข่าวสาร",
    "create_activity": "สร้างกิจกรรม",
    "edit_activity": "แก้ไขกิจกรรม",
    "delete_activity": "ลบกิจกรรม",
    "create_media": "เพิ่มสื่อการเรียนรู้",
    "edit_media": "แก้ไขสื่อการเรียนรู้",
    "delete_media": "ลบสื่อการเรียนรู้",
    "manage_personnel": "จัดการข้อมูลบุคลากร",
}


@dataclass(frozen=True)
class Tile:
    key: str
    title: str
    description: str
    href: str
    allowed_roles: Tuple[Role, ...]
    required_permission: str


_STAFF = (Role.TEACHER, Role.ADMIN)
_EVERYONE = (Role.TEACHER, Role.STUDENT, Role.GUARDIAN, Role.ADMIN)

TILES: Tuple[Tile, ...] = (
    Tile("library", "ระบบห้องสมุด", "จัดการหนังสือ การยืม-คืน และทรัพยากรการเรียนรู้",
         "/library", _EVERYONE, "menu_library"),
    Tile("supplies", "ระบบงานพัสดุ", "จัดการพัสดุ วัสดุ อุปกรณ์การศึกษา",
         "/supplies", _STAFF, "menu_supplies"),
    Tile("student_affairs", "ระบบกิจการนักเรียน", "จัดการข้อมูลนักเรียน กิจกรรม และพฤติกรรม",
         "/student-affairs", _STAFF, "menu_student_affairs"),
    Tile("academic", "ระบบงานวิชาการ", "จัดการหลักสูตร การสอน และประเมินผล",
         "/academic", _STAFF, "menu_academic"),
    Tile("waste_bank", "ธนาคารขยะ", "โครงการรีไซเคิล การจัดการขยะ",
         "/waste-bank", _EVERYONE, "menu_waste_bank"),
    Tile("public_relations", "ประชาสัมพันธ์", "จัดการข่าวสาร ประกาศ และกิจกรรม",
         "/public-relations", _STAFF, "menu_public_relations"),
    Tile("personnel", "ระบบบุคลากร", "จัดการข้อมูลครู และเจ้าหน้าที่",
         "/personnel", _STAFF, "menu_personnel"),
    Tile("facilities", "งานอาคารสถานที่", "จัดการอาคาร สิ่งก่อสร้าง และสภาพแวดล้อม",
         "/facilities", _STAFF, "menu_facilities"),
    Tile("admin", "Admin", "จัดการระบบ ผู้ใช้งาน และการตั้งค่า",
         "/admin", (Role.ADMIN,), "menu_admin"),
)


def get_permission_catalog() -> Dict[str, str]:
    """
    Returns every grantable permission key with its label.
    Format: {"view_news": "ดูข่าวสาร", ..., "menu_library": "เมนู ระบบห้องสมุด", ...}
    """
    catalog = dict(CONTENT_PERMISSIONS)
    for tile in TILES:
        catalog[tile.required_permission] = f"เมนู {tile.title}"
    return catalog


PERMISSION_CATALOG: Dict[str, str] = get_permission_catalog()
PERMISSION_NAMES: FrozenSet[str] = frozenset(PERMISSION_CATALOG)


def parse_role(value: Optional[str]) -> Role:
    """Convert a stored role string, rejecting anything outside the enum"""
    try:
        return Role(value)
    except ValueError:
        raise ValueError(f"Unknown role: {value!r}")


def approval_status(approved: bool, pending_approval: bool) -> ApprovalStatus:
    # approved wins over a stale pending flag
    if approved:
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING
