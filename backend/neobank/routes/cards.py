"""
Card Routes — list, request, controls, freeze and per-card activity.
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neobank.database import get_db
from neobank.models.card import Card
from neobank.schemas.schemas import (
    CardControlResponse, CardControlsUpdate, CardCreateRequest, CardFreezeRequest,
    CardMutationResponse, CardResponse, CardStats, CardTransactionResponse,
)
from neobank.services import summaries
from neobank.services.card_service import CardService
from neobank.routes.errors import mutation_errors
from neobank.utils.formatting import format_card_expiry

router = APIRouter(prefix="/api/cards", tags=["Cards"])


def _card_response(card: Card) -> CardResponse:
    response = CardResponse.model_validate(card)
    response.expiry_display = format_card_expiry(card.expires_at)
    response.stats = CardStats(**summaries.card_stats(card.transactions))
    return response


@router.get("", response_model=List[CardResponse])
def list_cards(db: Session = Depends(get_db)):
    return [_card_response(card) for card in CardService.list(db)]


@router.get("/{card_id}", response_model=CardResponse)
def get_card(card_id: str, db: Session = Depends(get_db)):
    return _card_response(CardService.get(db, card_id))


@router.post("", response_model=CardMutationResponse, status_code=201)
def request_card(payload: CardCreateRequest, db: Session = Depends(get_db)):
    """Virtual cards are usable immediately; physical cards start as requested."""
    with mutation_errors(db, "request card"):
        card = CardService.create(db, payload.card_type, payload.cardholder_name.strip(), payload.monthly_limit)
    return CardMutationResponse(message="Card requested successfully", card=_card_response(card))


@router.patch("/{card_id}/controls", response_model=CardControlResponse)
def update_controls(card_id: str, payload: CardControlsUpdate, db: Session = Depends(get_db)):
    with mutation_errors(db, "update card controls"):
        return CardService.update_controls(db, card_id, payload.model_dump(exclude_unset=True))


@router.post("/{card_id}/freeze", response_model=CardMutationResponse)
def freeze_card(card_id: str, payload: CardFreezeRequest, db: Session = Depends(get_db)):
    with mutation_errors(db, "update card"):
        card = CardService.set_frozen(db, card_id, payload.freeze)
    message = "Card frozen" if payload.freeze else "Card unfrozen"
    return CardMutationResponse(message=message, card=_card_response(card))


@router.get("/{card_id}/transactions", response_model=List[CardTransactionResponse])
def list_card_transactions(card_id: str, db: Session = Depends(get_db)):
    CardService.get(db, card_id)
    return CardService.transactions(db, card_id)


@router.get("/{card_id}/stats", response_model=CardStats)
def get_card_stats(card_id: str, db: Session = Depends(get_db)):
    CardService.get(db, card_id)
    return summaries.card_stats(CardService.transactions(db, card_id))
