"""Contract hashing and OpenTimestamps calendar submission.

Calendars are tried in order and the first 2xx answer is kept. When none
answer, signing still proceeds with a pending placeholder proof.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlparse

import requests

from webmarcas.core.config import Config, get_config
from webmarcas.models.base import utcnow

logger = logging.getLogger(__name__)

OTS_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/vnd.opentimestamps.v1",
}
PENDING_NETWORK = "Bitcoin (OpenTimestamps - Pending)"


def compute_contract_hash(contract_html: str, signature_image: str | None = None) -> str:
    """SHA-256 hex of the contract text followed by the signature image data."""
    payload = f"{contract_html or ''}{signature_image or ''}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


@dataclass(frozen=True)
class TimestampProof:
    hash: str
    proof: str
    proof_bytes: bytes | None
    server: str | None
    network: str
    tx_id: str
    timestamp: datetime

    @property
    def pending(self) -> bool:
        return self.proof_bytes is None


class TimestampClient:
    def __init__(self, config: Config | None = None, session: requests.Session | None = None) -> None:
        self.config = config or get_config()
        self.session = session or requests.Session()

    def stamp(self, hash_hex: str, now: datetime | None = None) -> TimestampProof:
        digest = bytes.fromhex(hash_hex)
        proof_bytes: bytes | None = None
        server_used: str | None = None

        for server in self.config.OTS_CALENDAR_SERVERS:
            try:
                response = self.session.post(
                    f"{server}/digest",
                    data=digest,
                    headers=OTS_HEADERS,
                    timeout=(2, self.config.OTS_TIMEOUT_SECONDS),
                )
            except requests.exceptions.RequestException as exc:
                logger.warning(
                    "signature.timestamp.server_failed",
                    extra={"event": "signature.timestamp.server_failed", "server": server, "error": str(exc)},
                )
                continue
            if 200 <= response.status_code < 300 and response.content:
                proof_bytes = response.content
                server_used = server
                break
            logger.warning(
                "signature.timestamp.server_rejected",
                extra={
                    "event": "signature.timestamp.server_rejected",
                    "server": server,
                    "status_code": response.status_code,
                },
            )

        stamped_at = now or utcnow()
        tx_id = f"OTS_{int(stamped_at.timestamp() * 1000)}_{hash_hex[:16].upper()}"
        if server_used is None:
            logger.warning(
                "signature.timestamp.pending",
                extra={"event": "signature.timestamp.pending", "hash": hash_hex},
            )
            return TimestampProof(
                hash=hash_hex,
                proof=f"PENDING_{hash_hex[:32]}",
                proof_bytes=None,
                server=None,
                network=PENDING_NETWORK,
                tx_id=tx_id,
                timestamp=stamped_at,
            )

        logger.info(
            "signature.timestamp.stamped",
            extra={"event": "signature.timestamp.stamped", "hash": hash_hex, "server": server_used},
        )
        return TimestampProof(
            hash=hash_hex,
            proof=base64.b64encode(proof_bytes or b"").decode("ascii"),
            proof_bytes=proof_bytes,
            server=server_used,
            network=f"Bitcoin (OpenTimestamps via {urlparse(server_used).hostname})",
            tx_id=tx_id,
            timestamp=stamped_at,
        )
