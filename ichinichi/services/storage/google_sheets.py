"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Users can view (and chart) their items directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (the repository serializes writes instead)
- Limited query capabilities (we filter in Python)

The implementation follows the abstract interface, so business logic
doesn't care whether items live here, in memory, or in a JSON file.
"""

import json
from datetime import date, datetime
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ichinichi.config import GoogleSheetsSettings, get_settings
from ichinichi.models.audit import AuditEvent, AuditEventType, AuditSeverity
from ichinichi.models.item import DateRange, Item, PaymentCadence
from ichinichi.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    ItemStorageInterface,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

# Column mappings for Items sheet
ITEM_COLUMNS = [
    "id",
    "name",
    "price",
    "cadence",
    "payment_start",
    "payment_end",
    "usage_start",
    "usage_end",
    "category",
    "cost_per_day",
    "created_at",
    "updated_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

_retry_writes = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_not_exception_type((NotFoundError, DuplicateError)),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_items_sheet(self) -> gspread.Worksheet:
        """Get or create the Items worksheet."""
        return self._get_or_create_sheet(
            self._settings.items_sheet_name, ITEM_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def _date_or_blank(value: Optional[date]) -> str:
    return value.isoformat() if value else ""


class GoogleSheetsItemStorage(ItemStorageInterface):
    """
    Google Sheets implementation of item storage.

    Items are stored one per row, in insertion order.
    Periods are flattened into start/end columns.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _item_to_row(self, item: Item) -> list:
        """Convert an Item to a spreadsheet row."""
        payment = item.payment_period
        return [
            str(item.id),
            item.name,
            repr(item.price),
            item.cadence.value,
            _date_or_blank(payment.start_date if payment else None),
            _date_or_blank(payment.end_date if payment else None),
            item.usage_period.start_date.isoformat(),
            item.usage_period.end_date.isoformat(),
            item.category or "",
            repr(item.cost_per_day),
            item.created_at.isoformat(),
            item.updated_at.isoformat(),
        ]

    def _row_to_item(self, row: list) -> Item:
        """Convert a spreadsheet row to an Item."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        payment_period = None
        if safe_get(4) and safe_get(5):
            payment_period = DateRange(
                start_date=date.fromisoformat(safe_get(4)),
                end_date=date.fromisoformat(safe_get(5)),
            )

        return Item(
            id=UUID(safe_get(0)),
            name=safe_get(1),
            price=float(safe_get(2)),
            cadence=PaymentCadence(safe_get(3)),
            payment_period=payment_period,
            usage_period=DateRange(
                start_date=date.fromisoformat(safe_get(6)),
                end_date=date.fromisoformat(safe_get(7)),
            ),
            category=safe_get(8) or None,
            cost_per_day=float(safe_get(9, "0")),
            created_at=datetime.fromisoformat(safe_get(10)),
            updated_at=datetime.fromisoformat(safe_get(11)),
        )

    def _find_row(self, all_rows: list[list], item_id: UUID) -> Optional[int]:
        """1-based sheet row index for an item (row 1 is the header)."""
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == str(item_id):
                return idx
        return None

    @_retry_writes
    async def save_item(self, item: Item) -> bool:
        """Append an item row."""
        try:
            sheet = self._client.get_items_sheet()
            if self._find_row(sheet.get_all_values(), item.id) is not None:
                raise DuplicateError(f"Item already exists: {item.id}")
            sheet.append_row(self._item_to_row(item), value_input_option="RAW")
            return True
        except DuplicateError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save item: {e}")

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        """Retrieve an item by its ID."""
        try:
            sheet = self._client.get_items_sheet()
            all_rows = sheet.get_all_values()
            idx = self._find_row(all_rows, item_id)
            if idx is None:
                return None
            return self._row_to_item(all_rows[idx - 1])
        except Exception as e:
            raise StorageError(f"Failed to get item: {e}")

    @_retry_writes
    async def update_item(self, item: Item) -> bool:
        """Overwrite an item's row in place."""
        try:
            sheet = self._client.get_items_sheet()
            idx = self._find_row(sheet.get_all_values(), item.id)
            if idx is None:
                raise NotFoundError(f"Item not found: {item.id}")

            row_range = f"A{idx}:{rowcol_to_a1(idx, len(ITEM_COLUMNS))}"
            sheet.update(
                range_name=row_range,
                values=[self._item_to_row(item)],
                value_input_option="RAW",
            )
            return True
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update item: {e}")

    @_retry_writes
    async def delete_item(self, item_id: UUID) -> bool:
        """Delete an item row by ID."""
        try:
            sheet = self._client.get_items_sheet()
            idx = self._find_row(sheet.get_all_values(), item_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete item: {e}")

    async def list_items(self) -> list[Item]:
        """List all items in sheet order."""
        try:
            sheet = self._client.get_items_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to list items: {e}")

        items = []
        for row_number, row in enumerate(all_rows, start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                items.append(self._row_to_item(row))
            except (ValueError, IndexError) as e:
                # A hand-edited row shouldn't hide every other item
                logger.warning("malformed_item_row", row=row_number, error=str(e))
        return items


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=UUID(safe_get(5)) if safe_get(5) else None,
            correlation_id=UUID(safe_get(6)) if safe_get(6) else None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    def _read_events(self, keep) -> list[AuditEvent]:
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0] or not keep(row):
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, IndexError) as e:
                logger.warning("malformed_audit_row", error=str(e))
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            # Audit logging should not break the main flow
            logger.warning(
                "audit_sheet_write_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        events = self._read_events(
            lambda row: len(row) > 6 and row[6] == str(correlation_id)
        )
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by entity."""
        events = self._read_events(
            lambda row: (
                len(row) > 5
                and row[4] == entity_type
                and row[5] == str(entity_id)
            )
        )
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events, newest first."""
        events = self._read_events(lambda row: True)
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
