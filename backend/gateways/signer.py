# backend/gateways/signer.py
# Request signing strategies

import time
import hashlib
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple

REQUEST_TIME_FIELD = "request_time"


class RequestSigner(ABC):
    """sign(params, timestamp) -> signature"""

    @abstractmethod
    def sign(self, params: Mapping[str, str], timestamp: str) -> str:
        pass

    @abstractmethod
    def headers(self, signature: str, timestamp: str) -> Dict[str, str]:
        """Headers carrying the signature"""
        pass


class LengthPrefixSha512Signer(RequestSigner):
    """
    Length-prefixed value concat + SHA-512

    Every value becomes len(value) + value (length in characters), the pieces
    are UTF-8 encoded, sorted bytewise and joined behind the timestamp. Keys
    are ignored and duplicate values are kept.
    """

    def sign(self, params: Mapping[str, str], timestamp: str) -> str:
        pieces = []
        for value in params.values():
            text = str(value)
            pieces.append((str(len(text)) + text).encode("utf-8"))
        pieces.sort()

        digest_input = str(timestamp).encode("utf-8") + b"".join(pieces)
        return hashlib.sha512(digest_input).hexdigest()

    def headers(self, signature: str, timestamp: str) -> Dict[str, str]:
        return {"Signature": signature, "Timestamp": timestamp}


def request_time() -> str:
    """Epoch milliseconds"""
    return str(int(time.time() * 1000))


def sign_request(
    params: Mapping[str, str],
    signer: RequestSigner,
    timestamp: Optional[str] = None
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Inject request_time, sign → (params, headers)"""
    timestamp = timestamp or request_time()
    signed = {k: str(v) for k, v in params.items()}
    signed[REQUEST_TIME_FIELD] = timestamp

    signature = signer.sign(signed, timestamp)
    return signed, signer.headers(signature, timestamp)
