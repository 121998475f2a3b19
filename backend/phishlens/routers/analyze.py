# backend/phishlens/routers/analyze.py
import logging

from fastapi import APIRouter, Depends, Request

from ..errors import ValidationError
from ..schemas import Account, AnalyzeEmailBody, AnalyzeUrlBody
from ..security import get_store, require_user
from ..services import history
from ..services.scanner import ScanOrchestrator
from ..services.store import Store

logger = logging.getLogger("phishlens.analyze")

router = APIRouter()


def get_orchestrator(request: Request) -> ScanOrchestrator:
    return request.app.state.orchestrator


# Providers are only called once require_user has resolved an account.
@router.post("/url")
async def analyze_url(
    body: AnalyzeUrlBody,
    user: Account = Depends(require_user),
    store: Store = Depends(get_store),
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
):
    if not body.url or not isinstance(body.url, str):
        raise ValidationError("Missing url string")

    result = await orchestrator.analyze_url(body.url)
    entry = history.build_scan_record(result, user.id)
    await history.record(store, user.id, entry)
    logger.info("URL scan by %s: %s", user.id, body.url)
    return entry


@router.post("/email")
async def analyze_email(
    body: AnalyzeEmailBody,
    request: Request,
    user: Account = Depends(require_user),
    store: Store = Depends(get_store),
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
):
    if not body.emailText or not isinstance(body.emailText, str):
        raise ValidationError("Missing emailText string")

    extracted, analyses = await orchestrator.analyze_email(body.emailText)
    entry = history.build_email_record(
        body.emailText,
        extracted,
        analyses,
        user.id,
        preview_chars=request.app.state.settings.EMAIL_PREVIEW_CHARS,
    )
    await history.record(store, user.id, entry)
    logger.info("Email analysis by %s: %d urls", user.id, len(extracted))
    return entry
