"""
Persistence gateway.

Loads and saves the terminal state (inventory, sale history, auth flag) as
JSON documents in the `KeyValueEntry` table. Records that cannot be read
are skipped; absent fields load as defaults.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DatabaseError, transaction

from apps.medicines.serializers import MedicineRecordSerializer
from apps.sales.serializers import SaleRecordSerializer
from apps.terminal.exceptions import GatewayError
from .models import KeyValueEntry

logger = logging.getLogger(__name__)


@dataclass
class StoredState:
    inventory: list = field(default_factory=list)
    sales: list = field(default_factory=list)
    auth_flag: bool = False


class PersistenceGateway:
    INVENTORY_KEY = "pharma_inventory"
    SALES_KEY = "pharma_sales"
    AUTH_KEY = "pharma_auth"

    def __init__(self, retries=None):
        self.retries = settings.PERSISTENCE_RETRIES if retries is None else retries

    @staticmethod
    def _read_records(documents, serializer_class, key):
        if not isinstance(documents, list):
            if documents is not None:
                logger.warning("Ignoring %s: expected a list, got %s", key, type(documents).__name__)
            return []

        records = []
        for index, document in enumerate(documents):
            serializer = serializer_class(data=document)
            if serializer.is_valid():
                records.append(serializer.save())
            else:
                logger.warning("Skipping unreadable %s record #%s: %s", key, index, serializer.errors)
        return records

    @staticmethod
    def _read_flag(value):
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    def load(self):
        """
        Read the stored state. Missing documents load as empty.
        """
        try:
            stored = dict(KeyValueEntry.objects.values_list("key", "value"))
        except DatabaseError as exc:
            raise GatewayError(f"Could not load terminal state: {exc}") from exc

        state = StoredState(
            inventory=self._read_records(stored.get(self.INVENTORY_KEY), MedicineRecordSerializer, self.INVENTORY_KEY),
            sales=self._read_records(stored.get(self.SALES_KEY), SaleRecordSerializer, self.SALES_KEY),
            auth_flag=self._read_flag(stored.get(self.AUTH_KEY)),
        )
        logger.debug("Loaded %s medicines and %s sales", len(state.inventory), len(state.sales))
        return state

    @staticmethod
    def dump(inventory, sales, auth_flag):
        return {
            PersistenceGateway.INVENTORY_KEY: MedicineRecordSerializer(list(inventory), many=True).data,
            PersistenceGateway.SALES_KEY: SaleRecordSerializer(list(sales), many=True).data,
            PersistenceGateway.AUTH_KEY: bool(auth_flag),
        }

    def save(self, inventory, sales, auth_flag=False):
        """
        Write the whole state in one transaction, retrying on database errors.
        """
        documents = self.dump(inventory, sales, auth_flag)
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    for key, value in documents.items():
                        KeyValueEntry.objects.update_or_create(key=key, defaults={"value": value})
                return
            except DatabaseError as exc:
                if attempt == attempts:
                    logger.error("Saving terminal state failed after %s attempt(s): %s", attempts, exc)
                    raise GatewayError(f"Could not save terminal state: {exc}") from exc
                logger.warning("Saving terminal state failed (attempt %s of %s): %s", attempt, attempts, exc)
