from fastapi import APIRouter

from roombook.api.v1 import bookings, checkin, health, notifications, rooms, waitlist


api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(checkin.router, prefix="/checkin", tags=["checkin"])
api_router.include_router(waitlist.router, prefix="/waitlist", tags=["waitlist"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
