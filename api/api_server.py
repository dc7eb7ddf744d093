#!/usr/bin/env python3
"""
HTTP API for the biometric sign-in monitor.

Maps the event ledger onto the endpoints the scanning device and the
dashboard poll. All state is in memory and is lost on restart.
"""
import time
import threading
import traceback
from datetime import datetime
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ledger import DeviceCommandBit, EventLedger, ValidationError
from utils.config import config
from utils.logger import logger

# Pydantic models for API requests
class FingerprintPayload(BaseModel):
    name: Optional[str] = None
    action: Optional[str] = None
    timestamp: Any = None  # seconds, milliseconds or date string

class PiStatusRequest(BaseModel):
    status: Any = None

class BiometricServer:
    """Owns the ledger and command bit and exposes them over FastAPI."""

    def __init__(self, ledger: Optional[EventLedger] = None,
                 command_bit: Optional[DeviceCommandBit] = None):
        if ledger is None:
            ledger = EventLedger(
                max_history=config.ledger.max_history,
                tolerance_ms=config.ledger.duplicate_tolerance_ms
            )
        self.ledger = ledger
        self.command_bit = command_bit if command_bit is not None else DeviceCommandBit()
        self.start_time = time.time()

        self.api_app = None
        self._setup_api()

    def get_uptime(self) -> float:
        return time.time() - self.start_time

    def _setup_api(self):
        """Setup FastAPI application and routes."""
        self.api_app = FastAPI(
            title="Biometric Sign-In Monitor API",
            description="Receives fingerprint sign-in/sign-out events and serves them to the dashboard",
            version="1.0.0"
        )

        # CORS middleware
        self.api_app.add_middleware(
            CORSMiddleware,
            allow_origins=config.server.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Exception handlers
        @self.api_app.exception_handler(ValidationError)
        async def validation_error_handler(request: Request, exc: ValidationError):
            logger.log_rejection(str(exc))
            return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

        @self.api_app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
            )
            if request.url.path == "/pi-status":
                logger.warning(f"Malformed device status body: {errors}")
                return JSONResponse(status_code=400, content={"ok": False, "error": "status must be 0 or 1"})

            logger.log_rejection(f"Malformed request body: {errors}")
            return JSONResponse(
                status_code=400,
                content={"success": False, "error": f"Invalid data format. Required: name, action, timestamp ({errors})"}
            )

        @self.api_app.exception_handler(Exception)
        async def global_exception_handler(request: Request, exc: Exception):
            logger.error(f"Global exception handler: {exc}")
            logger.error(f"Traceback: {traceback.format_exc()}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": "Internal server error", "message": str(exc)}
            )

        # Device endpoints
        @self.api_app.post("/fingerprint-data")
        async def receive_fingerprint_data(payload: FingerprintPayload):
            """Receive a sign-in/sign-out event from the scanning device."""
            event, created = self.ledger.record(payload.model_dump())
            entry = event.to_dict()
            logger.log_ingest_event(entry, duplicate=not created)

            return {
                "success": True,
                "message": "Data received successfully",
                "entry": entry
            }

        @self.api_app.get("/pi-status")
        async def get_pi_status():
            """Current command bit, polled by the device."""
            return {"status": self.command_bit.get()}

        @self.api_app.post("/pi-status")
        async def set_pi_status(request: PiStatusRequest):
            """Set the command bit from the dashboard."""
            try:
                status = self.command_bit.set(request.status)
            except ValidationError as e:
                return JSONResponse(status_code=400, content={"ok": False, "error": str(e)})
            return {"ok": True, "status": status}

        # Dashboard endpoints
        @self.api_app.get("/api/data")
        async def get_all_data():
            """All retained entries, newest first."""
            entries = [event.to_dict() for event in self.ledger.list_recent()]
            return {"success": True, "count": len(entries), "data": entries}

        @self.api_app.get("/api/data/latest")
        async def get_latest_data():
            """Most recent entry only."""
            event = self.ledger.latest()
            return {"success": True, "data": event.to_dict() if event else None}

        @self.api_app.delete("/api/data")
        async def clear_data():
            """Clear all entries and sessions. Irreversible."""
            removed = self.ledger.clear()
            logger.log_event("LEDGER_CLEARED", {"removed": removed})
            return {
                "success": True,
                "message": f"Cleared {removed} entries",
                "removed": removed
            }

        @self.api_app.get("/api/stats")
        async def get_stats():
            """Statistics derived from the retained entries."""
            return {"success": True, "stats": self.ledger.statistics().to_dict()}

        @self.api_app.get("/api/sessions")
        async def get_sessions():
            """Names currently signed in."""
            sessions = sorted(self.ledger.active_sessions().values(), key=lambda s: s.start_time)
            return {
                "success": True,
                "count": len(sessions),
                "sessions": [session.to_dict() for session in sessions]
            }

        # Health check
        @self.api_app.get("/health")
        async def health_check():
            """Liveness probe."""
            return {
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "uptime": self.get_uptime(),
                "entriesStored": self.ledger.size
            }

        logger.debug("API endpoints configured successfully")

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """Run the API server in the current thread."""
        host = host or config.server.host
        port = port or config.server.port

        logger.info(f"Starting API server on {host}:{port}")

        config_uvicorn = uvicorn.Config(
            app=self.api_app,
            host=host,
            port=port,
            log_level=config.logging.log_level.lower(),
            access_log=True,
            use_colors=False,
            loop="asyncio"
        )
        server = uvicorn.Server(config_uvicorn)
        server.run()

    def start_api_server(self, host: Optional[str] = None, port: Optional[int] = None) -> threading.Thread:
        """Start the API server in a daemon thread."""
        api_thread = threading.Thread(target=self.run, args=(host, port), daemon=True)
        api_thread.start()
        logger.info("API server thread started")
        return api_thread


def create_app(ledger: Optional[EventLedger] = None,
               command_bit: Optional[DeviceCommandBit] = None) -> FastAPI:
    """Build the FastAPI application around a ledger instance."""
    return BiometricServer(ledger=ledger, command_bit=command_bit).api_app
