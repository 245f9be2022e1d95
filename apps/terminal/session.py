"""
Terminal session.

A `PharmacySession` owns the inventory ledger, the transaction engine and
the sale history for one operator terminal, and decides when state is
written through the persistence gateway.
"""
import logging

from django.conf import settings
from django.utils import timezone

from apps.inventory.ledger import InventoryLedger
from apps.sales.receipts import Receipt
from apps.sales.services import InvoiceNumberGenerator, TransactionEngine
from .exceptions import GatewayError, NotFoundError

logger = logging.getLogger(__name__)


class PharmacySession:
    def __init__(self, ledger=None, history=(), gateway=None, auth_flag=False, autosave=None, clock=None):
        self.ledger = ledger if ledger is not None else InventoryLedger()
        self._history = list(history)
        self.gateway = gateway
        self.auth_flag = bool(auth_flag)
        self.autosave = settings.POS_AUTOSAVE if autosave is None else autosave
        self.clock = clock or timezone.now
        self.engine = TransactionEngine(
            self.ledger,
            invoice_numbers=InvoiceNumberGenerator((sale.id for sale in self._history), clock=self.clock),
            clock=self.clock,
        )
        self.dirty = False
        self.persistence_warning = None

    @classmethod
    def open(cls, gateway, **kwargs):
        """
        Start a session from stored state.

        An unreadable store leaves the terminal usable with empty state.
        """
        try:
            state = gateway.load()
        except GatewayError as exc:
            logger.error("Starting with empty state: %s", exc)
            session = cls(gateway=gateway, **kwargs)
            session.persistence_warning = str(exc)
            return session
        return cls(
            ledger=InventoryLedger(state.inventory),
            history=state.sales,
            gateway=gateway,
            auth_flag=state.auth_flag,
            **kwargs,
        )

    @property
    def history(self):
        return tuple(self._history)

    @property
    def cart(self):
        return self.engine.cart

    # Inventory

    def add_medicine(self, **data):
        medicine = self.ledger.add(**data)
        self._changed()
        return medicine

    def update_medicine(self, medicine_id, **changes):
        medicine = self.ledger.update(medicine_id, **changes)
        self._changed()
        return medicine

    def remove_medicine(self, medicine_id):
        medicine = self.ledger.remove(medicine_id)
        self._changed()
        return medicine

    def decrement_stock(self, medicine_id, amount):
        adjustment = self.ledger.decrement(medicine_id, amount)
        self._changed()
        return adjustment

    # Sales

    def settle(self, **checkout):
        """
        Settle the cart and append the sale to history.

        Returns the engine's `SettlementResult`.
        """
        result = self.engine.process_sale(**checkout)
        self._history.append(result.sale)
        self._changed()
        return result

    def find_sale(self, sale_id):
        for sale in self._history:
            if sale.id == sale_id:
                return sale
        raise NotFoundError(sale_id, kind="Sale")

    def reprint(self, sale_id):
        return Receipt.for_reprint(self.find_sale(sale_id), reprinted_at=self.clock())

    def reset(self, medicines=(), sales=()):
        """Replace inventory and history wholesale (used by seeding)."""
        self.ledger = InventoryLedger(medicines)
        self._history = list(sales)
        self.engine = TransactionEngine(
            self.ledger,
            invoice_numbers=InvoiceNumberGenerator((sale.id for sale in self._history), clock=self.clock),
            clock=self.clock,
        )
        self._changed()

    # Persistence

    def _changed(self):
        self.dirty = True
        if self.autosave:
            self.flush()

    def flush(self):
        """
        Write current state through the gateway.

        Returns False and records `persistence_warning` when the write fails;
        the session keeps running from memory.
        """
        if self.gateway is None:
            return True
        try:
            self.gateway.save(self.ledger.all(), self._history, self.auth_flag)
        except GatewayError as exc:
            self.persistence_warning = str(exc)
            logger.warning("Terminal state kept in memory only: %s", exc)
            return False
        self.dirty = False
        self.persistence_warning = None
        return True
