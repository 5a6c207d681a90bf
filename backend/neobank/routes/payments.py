"""
Payment Routes — beneficiaries, outgoing payments and payment links.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.database import get_db
from neobank.models.payment import Payment
from neobank.schemas.schemas import (
    BeneficiaryCreateRequest, BeneficiaryMutationResponse, BeneficiaryResponse,
    PaymentCreateRequest, PaymentLinkCreateRequest, PaymentLinkMutationResponse,
    PaymentMutationResponse, PaymentResponse, PaymentsResponse,
)
from neobank.services.payment_service import PaymentService
from neobank.routes.errors import mutation_errors
from neobank.utils.formatting import format_display_date

settings = get_settings()
router = APIRouter(prefix="/api/payments", tags=["Payments"])


def _payment_response(payment: Payment) -> PaymentResponse:
    response = PaymentResponse.model_validate(payment)
    response.date_display = format_display_date(payment.created_at)
    return response


@router.get("", response_model=PaymentsResponse)
def get_payments(db: Session = Depends(get_db)):
    """Everything the payments screen shows: beneficiaries, payments and links."""
    return PaymentsResponse(
        beneficiaries=PaymentService.list_beneficiaries(db),
        payments=[_payment_response(p) for p in PaymentService.list_payments(db)],
        payment_links=PaymentService.list_links(db),
    )


@router.get("/beneficiaries", response_model=list[BeneficiaryResponse])
def list_beneficiaries(db: Session = Depends(get_db)):
    return PaymentService.list_beneficiaries(db)


@router.post("/beneficiaries", response_model=BeneficiaryMutationResponse, status_code=201)
def add_beneficiary(payload: BeneficiaryCreateRequest, db: Session = Depends(get_db)):
    with mutation_errors(db, "add beneficiary"):
        beneficiary = PaymentService.create_beneficiary(
            db, payload.name.strip(), payload.bank_name.strip(), payload.iban, payload.vendor_type,
        )
    return BeneficiaryMutationResponse(message="Beneficiary added successfully", beneficiary=beneficiary)


@router.post("", response_model=PaymentMutationResponse, status_code=201)
def create_payment(payload: PaymentCreateRequest, db: Session = Depends(get_db)):
    """New payments wait in pending_approval."""
    with mutation_errors(db, "create payment"):
        payment = PaymentService.create_payment(
            db, payload.beneficiary_id, payload.amount, payload.currency.upper(),
            payload.reference, payload.purpose, created_by=settings.DEMO_USER_ID,
        )
    return PaymentMutationResponse(message="Payment created successfully", payment=_payment_response(payment))


@router.post("/links", response_model=PaymentLinkMutationResponse, status_code=201)
def create_payment_link(payload: PaymentLinkCreateRequest, db: Session = Depends(get_db)):
    with mutation_errors(db, "create payment link"):
        link = PaymentService.create_link(db, payload.amount, payload.description)
    return PaymentLinkMutationResponse(message="Payment link created successfully", payment_link=link)
