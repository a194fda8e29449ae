from fastapi import APIRouter, Depends, Request
from school_portal.config import settings
from school_portal.core.dependencies import require_admin
from school_portal.core.rate_limit import limiter
from school_portal.database.supabase_client import get_supabase
from school_portal.modules.access.service import AuthContext
from school_portal.modules.admissions.schemas import AdmissionCreate, AdmissionResponse, AdmissionSubmitted
from school_portal.modules.admissions.service import AdmissionService
from slowapi.util import get_remote_address
from supabase import Client
from typing import List

router = APIRouter(prefix="/admissions", tags=["admissions"])


def get_admission_service(supabase: Client = Depends(get_supabase)) -> AdmissionService:
    return AdmissionService(supabase)


@router.post("", response_model=AdmissionSubmitted, status_code=201)
@limiter.limit(settings.admission_rate_limit)
async def submit_application(
    request: Request,
    application: AdmissionCreate,
    service: AdmissionService = Depends(get_admission_service)
):
    """Public admission form"""
    return service.submit(application, get_remote_address(request))


@router.get("", response_model=List[AdmissionResponse])
async def list_applications(
    admin: AuthContext = Depends(require_admin),
    service: AdmissionService = Depends(get_admission_service)
):
    return service.list_for_admin()
