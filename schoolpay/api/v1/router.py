"""API V1 Router"""

from fastapi import APIRouter

# Import endpoint routers
from schoolpay.api.v1.endpoints import (
    auth, session, plans, schools, enrollments,
    payments, notifications, users
)

# Create API v1 router
api_router = APIRouter()

# Include endpoint routers with prefixes and tags
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(session.router, prefix="/session", tags=["Session"])
api_router.include_router(plans.router, prefix="/plans", tags=["Installment Plans"])
api_router.include_router(schools.router, prefix="/schools", tags=["Schools"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
