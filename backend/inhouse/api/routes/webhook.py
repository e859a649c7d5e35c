"""
GitHub webhook endpoint
Records every push notification and queues master builds
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status

from inhouse.api.dependencies import get_store
from inhouse.auth.signature import verified_payload
from inhouse.database.mongodb import StoreContext
from inhouse.models.build import WebhookOutcome
from inhouse.services.webhook_service import webhook_service

router = APIRouter()


@router.post("")
@router.post("/{endpoint}")
async def github_webhook(
    endpoint: Optional[str] = None,
    payload: Dict[str, Any] = Depends(verified_payload),
    store: StoreContext = Depends(get_store),
):
    """
    Handle GitHub webhook events

    201 when a build was queued, 204 when the event was only recorded.
    """
    outcome = await webhook_service.process_webhook(store, payload, endpoint)

    if outcome is WebhookOutcome.QUEUED:
        return Response(status_code=status.HTTP_201_CREATED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
