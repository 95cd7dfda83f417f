from fastapi import APIRouter

from fest_api.modules.applications.router import router as review_applications_router
from fest_api.modules.dashboard.router import router as dashboard_router
from fest_api.modules.events.router import router as approved_students_router
from fest_api.modules.final_approval.router import router as final_approval_router

api_router = APIRouter()

api_router.include_router(
    review_applications_router, prefix="/review-applications", tags=["Review Applications"]
)

api_router.include_router(
    approved_students_router, prefix="/approved-students", tags=["Approved Students"]
)

api_router.include_router(final_approval_router, prefix="/final-approval", tags=["Final Approval"])

api_router.include_router(dashboard_router, prefix="/manager-dashboard", tags=["Dashboard"])
