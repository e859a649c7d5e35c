"""
GitHub webhook signature verification

Sits in front of the webhook ingestor and only lets signed requests
through. The ingestor itself trusts its input.
"""
import hashlib
import hmac
import json
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from inhouse.core.config import settings
from inhouse.utils.logger import logger

DIGESTS = {
    "sha256": hashlib.sha256,
    "sha1": hashlib.sha1,
}


class SignatureVerifier:
    """Checks `X-Hub-Signature-256` (or legacy `X-Hub-Signature`) headers"""

    def __init__(self, secret: Optional[str]):
        self.secret = secret

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def verify(self, payload_body: bytes, signature_header: Optional[str]) -> bool:
        if not self.enabled:
            return True
        if not signature_header:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing webhook signature",
            )

        # GitHub sends signatures as '<algorithm>=<hexdigest>'
        algorithm, _, github_signature = signature_header.partition("=")
        digest = DIGESTS.get(algorithm)
        if digest is None or not github_signature:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Malformed webhook signature",
            )

        mac = hmac.new(self.secret.encode(), msg=payload_body, digestmod=digest)
        return hmac.compare_digest(mac.hexdigest(), github_signature)


signature_verifier = SignatureVerifier(settings.GITHUB_SECRET)


def get_signature_verifier() -> SignatureVerifier:
    return signature_verifier


async def verified_payload(
    request: Request,
    x_hub_signature_256: Optional[str] = Header(None),
    x_hub_signature: Optional[str] = Header(None),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
) -> Dict[str, Any]:
    """FastAPI dependency returning the webhook payload once its signature checks out"""
    body = await request.body()
    if not verifier.verify(body, x_hub_signature_256 or x_hub_signature):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Webhook body must be JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Webhook body must be a JSON object")
    return payload
