"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Live scanning session over a WebSocket connection.

Protocol:
---------
1. Client connects; the server loads the shared list and replies with
   {"type": "ready", "view": ...}
2. Client sends JSON messages:
   - {"type": "code", "code": "FM123"}           code decoded client-side
   - {"type": "frame", "frame": "<base64>"}      server-side decoding
   - {"type": "delete", "codes": [...]} or {"type": "delete", "indices": [...]}
   - {"type": "clear"}
   - {"type": "view", "group": "Flipkart", "search": "fm", "tab": "list"}
   - {"type": "capture", "action": "start" | "stop"}
   - {"type": "refresh"}
   - {"type": "stop"}
3. Server replies per message and pushes {"type": "view"} whenever the
   periodic pull brings in a changed list.

==============================================================================
"""

import json
import logging
from typing import List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from scanlist.config import get_settings
from scanlist.db.database import get_db
from scanlist.scanner import BarcodeScanner
from scanlist.schemas.barcode import ScanMessage
from scanlist.services.refresh_service import RefreshTaskManager
from scanlist.services.repositories import create_repository
from scanlist.services.scan_session import ALREADY_EMPTY_MESSAGE, ScanSession
from scanlist.services.view_cache import ViewStateCache


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for live scanning WebSocket connections.

    Manages the lifecycle of a scanning session including:
    - Session start (initial pull)
    - Periodic pull while idle
    - Code and frame handling
    - List and view operations
    """

    def __init__(self, websocket: WebSocket, db: Session):
        self._websocket = websocket
        self._settings = get_settings()
        self._scanner = BarcodeScanner()

        client_host = websocket.client.host if websocket.client else None
        repository = create_repository(
            self._settings,
            session_factory=sessionmaker(bind=db.get_bind(), expire_on_commit=False),
            client_host=client_host
        )
        # View continuity is the client's concern; the server keeps no file
        self._session = ScanSession.from_settings(
            self._settings, repository, view_cache=ViewStateCache(None)
        )
        self._refresher = RefreshTaskManager(
            self._session,
            interval_seconds=self._settings.refresh_interval_seconds,
            on_refresh=self.send_view
        )

    # =========================================================================
    # REPLIES
    # =========================================================================

    async def send_error(self, message: str, code: str = "ERROR") -> None:
        """Send error message to client."""
        await self._websocket.send_json({
            "type": "error",
            "code": code,
            "message": message
        })

    async def send_view(self) -> None:
        """Send the current list view."""
        await self._websocket.send_json({
            "type": "view",
            "view": self._session.current_view().to_dict()
        })

    # =========================================================================
    # MESSAGE HANDLERS
    # =========================================================================

    async def handle_code(self, code: str) -> None:
        """Offer one decoded code to the list."""
        outcome = await self._session.handle_scan(code)
        await self._websocket.send_json({
            "type": "scan",
            "outcome": outcome.to_dict(),
            "view": self._session.current_view().to_dict()
        })

    async def handle_frame(self, frame: str) -> None:
        """Decode a frame and offer every valid code in it."""
        codes: List[str] = self._scanner.codes_in_base64(frame)
        if not codes:
            # Nothing in view is the normal case
            return
        for code in codes:
            await self.handle_code(code)

    async def handle_delete(self, message: ScanMessage) -> None:
        """Delete by codes (preferred) or by original indices."""
        if message.codes:
            removed = await self._session.delete_codes(message.codes)
        else:
            removed = await self._session.delete_many(message.indices)

        await self._websocket.send_json({
            "type": "deleted",
            "codes": [record.code for record in removed],
            "view": self._session.current_view().to_dict()
        })

    async def handle_clear(self) -> None:
        """Empty the list."""
        if not await self._session.clear():
            await self.send_error(ALREADY_EMPTY_MESSAGE, "ALREADY_EMPTY")
            return
        await self.send_view()

    async def handle_view(self, message: ScanMessage) -> None:
        """Apply tab, group and search changes."""
        if message.tab:
            self._session.set_active_tab(message.tab)

        if message.group is not None:
            if message.group:
                self._session.open_group(message.group)
            else:
                self._session.back_to_groups()

        if message.search is not None:
            self._session.set_search(message.search)

        await self.send_view()

    async def handle_message(self, raw: str) -> bool:
        """
        Parse and dispatch one client text frame.

        Malformed frames are answered with INVALID_MESSAGE and the
        session continues.

        Returns:
            False when the client asked to stop
        """
        try:
            data = json.loads(raw)
        except ValueError:
            await self.send_error("Invalid message: not JSON", "INVALID_MESSAGE")
            return True

        try:
            message = ScanMessage.model_validate(data)
        except ValidationError as e:
            await self.send_error(f"Invalid message: {e.error_count()} error(s)", "INVALID_MESSAGE")
            return True

        if message.type == "stop":
            logger.info("🛑 Client requested stop")
            return False

        try:
            if message.type == "code":
                await self.handle_code(message.code or "")
            elif message.type == "frame":
                await self.handle_frame(message.frame or "")
            elif message.type == "delete":
                await self.handle_delete(message)
            elif message.type == "clear":
                await self.handle_clear()
            elif message.type == "view":
                await self.handle_view(message)
            elif message.type == "capture":
                if message.action == "start":
                    self._session.begin_capture()
                else:
                    self._session.end_capture()
                await self._websocket.send_json({
                    "type": "capture",
                    "capturing": self._session.capturing
                })
            elif message.type == "refresh":
                await self._session.refresh()
                await self.send_view()
        except ValueError as e:
            await self.send_error(str(e), "INVALID_VIEW")

        return True

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        try:
            await self._session.start()
            await self._websocket.send_json({
                "type": "ready",
                "view": self._session.current_view().to_dict()
            })

            if self._settings.auto_refresh_enabled:
                self._refresher.start()

            while True:
                raw = await self._websocket.receive_text()
                if not await self.handle_message(raw):
                    break

            await self._websocket.close()

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            try:
                await self.send_error(str(e))
            except Exception:
                pass
        finally:
            self._refresher.stop()
            await self._session.close()
            self._scanner.close()
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(websocket: WebSocket, db: Session = Depends(get_db)):
    """Live barcode scanning session."""
    handler = ScannerWebSocketHandler(websocket, db)
    await handler.run()
