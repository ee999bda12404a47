# dental_ledger/api/router.py
from fastapi import APIRouter

from dental_ledger.api import routes_payments

api_router = APIRouter()

api_router.include_router(routes_payments.router)
