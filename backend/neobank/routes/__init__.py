from neobank.routes.account import router as account_router
from neobank.routes.dashboard import router as dashboard_router
from neobank.routes.cards import router as cards_router
from neobank.routes.expenses import router as expenses_router
from neobank.routes.invoices import router as invoices_router
from neobank.routes.payments import router as payments_router
from neobank.routes.onboarding import router as onboarding_router
from neobank.routes.drafts import router as drafts_router

__all__ = [
    "account_router", "dashboard_router", "cards_router", "expenses_router",
    "invoices_router", "payments_router", "onboarding_router", "drafts_router",
]
