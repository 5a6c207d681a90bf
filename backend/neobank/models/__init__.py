from neobank.models.organization import Organization, Account
from neobank.models.transaction import Transaction
from neobank.models.card import Card, CardControl, CardTransaction
from neobank.models.expense import Expense
from neobank.models.invoice import Invoice, InvoiceLineItem
from neobank.models.payment import Beneficiary, Payment, PaymentLink
from neobank.models.onboarding import (
    OnboardingCase, CompanyProfile, OnboardingPerson,
    ComplianceAnswers, OnboardingDocument, OnboardingEvent,
)

__all__ = [
    "Organization", "Account", "Transaction",
    "Card", "CardControl", "CardTransaction",
    "Expense", "Invoice", "InvoiceLineItem",
    "Beneficiary", "Payment", "PaymentLink",
    "OnboardingCase", "CompanyProfile", "OnboardingPerson",
    "ComplianceAnswers", "OnboardingDocument", "OnboardingEvent",
]
