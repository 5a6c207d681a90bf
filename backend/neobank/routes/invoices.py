"""
Invoice Routes — list, numbering, creation and status changes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neobank.database import get_db
from neobank.schemas.schemas import (
    InvoiceCreateRequest, InvoiceMutationResponse, InvoicesResponse, InvoiceStatusUpdate,
)
from neobank.services import summaries
from neobank.services.invoice_service import InvoiceService
from neobank.routes.errors import mutation_errors

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])


@router.get("", response_model=InvoicesResponse)
def list_invoices(db: Session = Depends(get_db)):
    invoices = InvoiceService.list(db)
    return InvoicesResponse(
        invoices=invoices,
        stats=summaries.invoice_stats(invoices),
        next_invoice_number=InvoiceService.next_number(db),
    )


@router.get("/next-number")
def next_invoice_number(db: Session = Depends(get_db)):
    return {"invoice_number": InvoiceService.next_number(db)}


@router.post("", response_model=InvoiceMutationResponse, status_code=201)
def create_invoice(payload: InvoiceCreateRequest, db: Session = Depends(get_db)):
    with mutation_errors(db, "create invoice"):
        invoice = InvoiceService.create(db, payload)
    message = "Invoice sent" if payload.send_immediately else "Invoice saved as draft"
    return InvoiceMutationResponse(message=message, invoice=invoice)


@router.patch("/{invoice_id}/status", response_model=InvoiceMutationResponse)
def update_invoice_status(invoice_id: str, payload: InvoiceStatusUpdate, db: Session = Depends(get_db)):
    with mutation_errors(db, "update invoice"):
        invoice = InvoiceService.update_status(db, invoice_id, payload.status)
    return InvoiceMutationResponse(message=f"Invoice marked as {payload.status}", invoice=invoice)
