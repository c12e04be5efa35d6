from fastapi import APIRouter

from app.modules.admissions import router as admissions_router
from app.modules.auth import router as auth_router
from app.modules.catalog.router import router as catalog_router
from app.modules.payments import admin_router as admin_payments_router
from app.modules.payments import router as payments_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])

api_router.include_router(
    admin_payments_router,
    prefix="/payments",
    tags=["Admin - Payments"],
)

api_router.include_router(admissions_router, prefix="/admissions", tags=["Admissions"])

api_router.include_router(catalog_router, prefix="/products", tags=["Products"])
