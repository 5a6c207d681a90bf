"""
Account Routes — account details and the searchable transaction ledger.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from neobank.database import get_db
from neobank.schemas.schemas import AccountResponse, LedgerResponse, TransactionFilter
from neobank.services import summaries
from neobank.services.account_service import AccountService
from neobank.utils.formatting import format_display_date

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.get("", response_model=AccountResponse)
def get_account(db: Session = Depends(get_db)):
    account = AccountService.get_account(db)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


@router.get("/transactions", response_model=LedgerResponse)
def list_transactions(
    search: str = Query("", max_length=100),
    type: TransactionFilter = Query("all"),
    db: Session = Depends(get_db),
):
    """Account, card and approved-expense movements in one list.

    Stats are computed over the filtered list so the totals always match what
    is on screen.
    """
    entries = summaries.filter_ledger(AccountService.ledger(db), search=search.strip(), type_filter=type)
    for entry in entries:
        entry["display_date"] = format_display_date(entry["created_at"])

    return LedgerResponse(
        transactions=entries,
        total_count=len(entries),
        stats=summaries.ledger_stats(entries),
    )
