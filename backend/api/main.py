"""
HTTP surface for the backend handlers.

Each route parses its request, runs the handler in the thread pool (the
Supabase client and providers block), and maps the handler result to a
status code.

Run locally:
    uv run uvicorn api.main:app --reload
"""

import json
import os
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from billing.stripe_webhooks import process_stripe_event
from billing.webhook_signature import WebhookSignatureError, verify_stripe_signature
from maintenance.bug_scanner import run_bug_scan
from maintenance.security_scanner import run_security_scan
from models import NotificationPayload
from moderation.tone_analyzer import analyze_tone
from notifications.delivery import send_notification
from notifications.scheduler import parse_hours_ahead, run_notification_scheduler
from notifications.unsubscribe_tokens import apply_opt_out
from shared.error_logger import log_handler_error

load_dotenv()

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

app = FastAPI(title="Co-Parenting Backend Handlers")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
        "stripe-signature",
    ],
)


async def _read_json(request: Request) -> Any:
    """Parsed JSON body, or None for an empty or malformed body."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/notification-scheduler")
async def notification_scheduler(request: Request) -> JSONResponse:
    """Create and send notifications for upcoming events."""
    body = await _read_json(request)
    result = await run_in_threadpool(
        run_notification_scheduler, hours_ahead=parse_hours_ahead(body)
    )
    return JSONResponse(result, status_code=200 if result["success"] else 500)


@app.post("/send-notification")
async def send_notification_route(request: Request) -> JSONResponse:
    """Send one notification on one channel, honouring user preferences."""
    body = await _read_json(request)
    try:
        payload = NotificationPayload.model_validate(body)
    except ValidationError as e:
        return JSONResponse(
            {"success": False, "error": f"Invalid notification payload: {e.errors()}"},
            status_code=400,
        )

    result = await run_in_threadpool(send_notification, payload)
    return JSONResponse(result, status_code=200 if result["success"] else 500)


@app.post("/tone-analyzer")
async def tone_analyzer(request: Request) -> JSONResponse:
    """Score the tone of a chat message."""
    body = await _read_json(request)
    message = body.get("message") if isinstance(body, dict) else None

    try:
        analysis = await run_in_threadpool(analyze_tone, message)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        error_file = log_handler_error(error_type="tone_analyzer", error_message=str(e))
        print(f"  ✗ Tone analyzer error. Details logged to: {error_file}")
        return JSONResponse({"error": str(e)}, status_code=500)

    return JSONResponse(analysis)


@app.post("/stripe-webhooks")
async def stripe_webhooks(request: Request) -> JSONResponse:
    """Apply a Stripe webhook event to subscription state."""
    raw_body = await request.body()

    secret = os.getenv("STRIPE_WEBHOOK_SECRET")
    if secret:
        try:
            verify_stripe_signature(
                raw_body, request.headers.get("stripe-signature"), secret
            )
        except WebhookSignatureError as e:
            print(f"  ✗ Rejected Stripe webhook: {e}")
            return JSONResponse({"error": str(e)}, status_code=400)
    else:
        print("  ⚠️  STRIPE_WEBHOOK_SECRET not configured - signature verification skipped")

    try:
        event = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    try:
        result = await run_in_threadpool(process_stripe_event, event)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    return JSONResponse(result, status_code=500 if "error" in result else 200)


@app.post("/bug-scanner")
async def bug_scanner() -> JSONResponse:
    result = await run_in_threadpool(run_bug_scan)
    return JSONResponse(result, status_code=500 if "error" in result else 200)


@app.post("/security-scanner")
async def security_scanner() -> JSONResponse:
    result = await run_in_threadpool(run_security_scan)
    return JSONResponse(result, status_code=500 if "error" in result else 200)


@app.get("/unsubscribe")
async def unsubscribe(token: str = "") -> JSONResponse:
    """One-click opt-out from a notification channel."""
    result = await run_in_threadpool(apply_opt_out, token)
    return JSONResponse(result, status_code=200 if result["success"] else 400)


@app.post("/unsubscribe")
async def unsubscribe_one_click(token: str = "") -> JSONResponse:
    """RFC 8058 one-click opt-out (List-Unsubscribe-Post)."""
    result = await run_in_threadpool(apply_opt_out, token)
    return JSONResponse(result, status_code=200 if result["success"] else 400)
