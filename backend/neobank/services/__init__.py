from neobank.services.account_service import AccountService
from neobank.services.card_service import CardService
from neobank.services.dashboard_service import DashboardService
from neobank.services.draft_store import DraftStore
from neobank.services.event_service import EventService
from neobank.services.expense_service import ExpenseService
from neobank.services.invoice_service import InvoiceService
from neobank.services.onboarding_service import OnboardingService
from neobank.services.payment_service import PaymentService
from neobank.services.registry_service import RegistryService
from neobank.services.risk_engine import RiskEngine
from neobank.services.storage_service import StorageService

__all__ = [
    "AccountService", "CardService", "DashboardService", "DraftStore", "EventService",
    "ExpenseService", "InvoiceService", "OnboardingService", "PaymentService", "RegistryService",
    "RiskEngine", "StorageService",
]
