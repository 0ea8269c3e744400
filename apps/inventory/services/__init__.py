from apps.inventory.services.adjustments import AdjustmentService
from apps.inventory.services.ledger import StockLedger
from apps.inventory.services.notes import MovementNoteService
from apps.inventory.services.reversal import ReversalEngine

__all__ = ['AdjustmentService', 'MovementNoteService', 'ReversalEngine', 'StockLedger']
