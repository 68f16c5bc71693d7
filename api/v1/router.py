# api/v1/router.py
from fastapi import APIRouter

from . import plans, catalogue, chat

api_router = APIRouter()

api_router.include_router(plans.router, prefix="/plans", tags=["Plans"])
api_router.include_router(catalogue.router, prefix="/catalogue", tags=["Catalogue"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
