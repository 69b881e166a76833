"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, bookings, kitchen

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Kitchen
api_router.include_router(kitchen.router, prefix="/kitchen", tags=["Kitchen"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
