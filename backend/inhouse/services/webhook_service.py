from typing import Any, Dict, Optional

from inhouse.core.config import settings
from inhouse.core.errors import store_errors
from inhouse.database.mongodb import StoreContext
from inhouse.models.build import BuildJob, WebhookOutcome
from inhouse.utils.logger import logger


class WebhookService:
    """
    Records every inbound push notification and queues a build for pushes
    to the build branch.

    The webhook record and the build job are two separate writes. If queueing
    fails after the record was stored, the record stays without a job.
    """

    def __init__(
        self,
        hook_collection: str = settings.HOOK_COLLECTION,
        build_queue_collection: str = settings.BUILD_QUEUE_COLLECTION,
        build_ref: str = settings.BUILD_BRANCH_REF,
    ):
        self.hook_collection = hook_collection
        self.build_queue_collection = build_queue_collection
        self.build_ref = build_ref

    async def process_webhook(
        self,
        store: StoreContext,
        payload: Dict[str, Any],
        endpoint: Optional[str] = None,
    ) -> WebhookOutcome:
        with store_errors():
            await store.collection(self.hook_collection).insert_one(payload)
        logger.info(f"Webhook recorded: {payload.get('_id')}")

        ref = payload.get("ref")
        if not ref:
            logger.info("Skipping webhook without ref (probably a ping)")
            return WebhookOutcome.SKIPPED_NO_REF

        if ref != self.build_ref:
            logger.info(f"Skipping webhook for {ref}")
            return WebhookOutcome.SKIPPED_BRANCH

        build = self.build_job(payload, endpoint)
        with store_errors():
            await store.collection(self.build_queue_collection).insert_one(build.to_document())

        logger.info(f"Build queued: {build.full_name}@{build.commit} (endpoint={endpoint})")
        return WebhookOutcome.QUEUED

    def build_job(self, payload: Dict[str, Any], endpoint: Optional[str] = None) -> BuildJob:
        repository = _section(payload, "repository")
        head_commit = _section(payload, "head_commit")

        return BuildJob(
            full_name=_text(repository, "full_name"),
            name=_text(repository, "name"),
            repo=_text(repository, "clone_url"),
            commit=_text(head_commit, "id"),
            endpoint=endpoint,
            pusher=payload.get("pusher"),
        )


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _text(section: Dict[str, Any], key: str) -> Optional[str]:
    # Malformed values are queued as null rather than failing the hook
    value = section.get(key)
    return value if isinstance(value, str) else None


webhook_service = WebhookService()
