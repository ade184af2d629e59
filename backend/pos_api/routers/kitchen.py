"""
Kitchen router.
Read-only cook queue for the kitchen display; status changes go through
the orders router.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pos_api.core.dependencies import get_terminal
from pos_api.models.kitchen import KitchenTicket
from pos_api.services.terminal import PosTerminal

router = APIRouter(prefix="/api/kitchen", tags=["kitchen"])


class KitchenBoardOutput(BaseModel):
    new: list[KitchenTicket]
    preparing: list[KitchenTicket]
    ready: list[KitchenTicket]


@router.get("/queue", response_model=list[KitchenTicket])
def get_kitchen_queue(terminal: PosTerminal = Depends(get_terminal)) -> list[KitchenTicket]:
    """
    Tickets for active orders with sent lines.

    Ordered NEW, PREPARING, READY, then oldest first.
    """
    return terminal.kitchen_queue()


@router.get("/board", response_model=KitchenBoardOutput)
def get_kitchen_board(terminal: PosTerminal = Depends(get_terminal)) -> KitchenBoardOutput:
    """Queue split into display columns; READY keeps only the latest tickets."""
    board = terminal.kitchen.board(terminal.orders)
    return KitchenBoardOutput(
        new=list(board.new),
        preparing=list(board.preparing),
        ready=list(board.ready),
    )
