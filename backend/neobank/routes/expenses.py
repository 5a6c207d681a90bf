"""
Expense Routes — list with stats, capture with receipt, approval.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from neobank.config import get_settings
from neobank.database import get_db
from neobank.schemas.schemas import (
    ExpenseMutationResponse, ExpensesResponse, ExpenseStatusUpdate,
)
from neobank.services import summaries
from neobank.services.expense_service import ExpenseService
from neobank.routes.errors import mutation_errors
from neobank.utils.rate_limiter import rate_limit

settings = get_settings()
router = APIRouter(prefix="/api/expenses", tags=["Expenses"])


@router.get("", response_model=ExpensesResponse)
def list_expenses(db: Session = Depends(get_db)):
    expenses = ExpenseService.list(db)
    return ExpensesResponse(
        expenses=expenses,
        stats=summaries.expense_stats(expenses),
        category_data=summaries.category_breakdown(expenses),
    )


@router.post("", response_model=ExpenseMutationResponse, status_code=201)
async def create_expense(
    amount: float = Form(..., gt=0),
    description: str = Form(..., min_length=1),
    category: str = Form(..., min_length=1),
    expense_date: date = Form(...),
    vendor: Optional[str] = Form(None),
    needs_approval: bool = Form(False),
    receipt: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _throttle: bool = Depends(rate_limit(requests=30, window=60, scope="receipts")),
):
    """Record an expense; the receipt (if any) is stored before the row is written."""
    receipt_url = None
    if receipt is not None and receipt.filename:
        contents = await receipt.read()
        with mutation_errors(db, "upload receipt"):
            receipt_url = ExpenseService.upload_receipt(settings.DEMO_USER_ID, receipt.filename, contents)

    data = {
        "amount": amount,
        "description": description,
        "category": category,
        "expense_date": expense_date,
        "vendor": vendor or None,
        "needs_approval": needs_approval,
    }
    with mutation_errors(db, "create expense"):
        expense = ExpenseService.create(db, settings.DEMO_USER_ID, data, receipt_url)

    message = "Expense submitted for approval" if needs_approval else "Expense recorded"
    return ExpenseMutationResponse(message=message, expense=expense)


@router.patch("/{expense_id}/status", response_model=ExpenseMutationResponse)
def update_expense_status(expense_id: str, payload: ExpenseStatusUpdate, db: Session = Depends(get_db)):
    """Approve, reject or reimburse; approval with details books a debit."""
    expense_data = payload.expense_data.model_dump() if payload.expense_data else None
    with mutation_errors(db, "update expense"):
        expense = ExpenseService.update_status(
            db, expense_id, payload.status, settings.DEMO_USER_ID, expense_data,
        )
    return ExpenseMutationResponse(message=f"Expense {payload.status}", expense=expense)
