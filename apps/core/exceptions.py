"""
Core App - Domain error taxonomy shared by all apps.
"""
from typing import Optional


class BusinessError(Exception):
    """Violação de regra de negócio (transição inválida, estado terminal, etc.)"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or 'BUSINESS_ERROR'


class NotFoundError(BusinessError):
    def __init__(self, resource: str, identifier=None):
        if identifier is not None:
            message = f"{resource} '{identifier}' não encontrado(a)"
        else:
            message = f"{resource} não encontrado(a)"
        super().__init__(message, 'NOT_FOUND')
        self.resource = resource
        self.identifier = identifier


class ConflictError(BusinessError):
    def __init__(self, message: str):
        super().__init__(message, 'CONFLICT')


class InsufficientStockError(BusinessError):
    """Saldo insuficiente: carrega a quantidade requerida e a disponível."""

    def __init__(self, required: int, available: int, stock_item=None, message: Optional[str] = None):
        if message is None:
            message = f"Estoque insuficiente. Disponível: {available}, Solicitado: {required}"
        super().__init__(message, 'INSUFFICIENT_STOCK')
        self.required = required
        self.available = available
        self.stock_item = stock_item
