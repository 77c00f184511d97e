from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

_SOFT_ERROR_RE = re.compile(r"404|not found|unsupported", re.IGNORECASE)
_CREDENTIAL_ERROR_RE = re.compile(r"API key not valid|API_KEY_INVALID|missing api key|no api key", re.IGNORECASE)


class ProviderError(Exception):
    """Metin üretim sağlayıcısından dönen hata (HTTP durumu + sağlayıcı mesajı)."""

    def __init__(self, message: str, status_code: Optional[int] = None, model: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.model = model

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{self.status_code} {base}"
        return base


class ModelsExhaustedError(Exception):
    """Hiçbir aday model yanıt veremedi (hepsi 'model bulunamadı' sınıfında hata verdi)."""

    def __init__(self, message: str = "no_supported_model_for_api_version"):
        super().__init__(message)


def is_credential_error(exc: BaseException) -> bool:
    return bool(_CREDENTIAL_ERROR_RE.search(str(exc)))


def is_soft_model_error(exc: BaseException) -> bool:
    """Model adı bu hesapta/sürümde yoksa True: sıradaki aday denenir."""
    if is_credential_error(exc):
        return False
    if isinstance(exc, ProviderError) and exc.status_code == 404:
        return True
    return bool(_SOFT_ERROR_RE.search(str(exc)))


class LLMProvider:
    async def generate(self, model_id: str, prompt: str) -> str:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class GeminiProvider(LLMProvider):
    """Google Generative Language REST API (models/{id}:generateContent)."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            data = resp.json()
        except ValueError:
            return resp.text[:500] or resp.reason_phrase
        error = data.get("error") if isinstance(data, dict) else None
        if not isinstance(error, dict):
            return resp.text[:500]
        message = str(error.get("message") or resp.reason_phrase)
        # API_KEY_INVALID gibi makine kodları details[].reason içinde gelir
        reasons = [d.get("reason") for d in error.get("details") or [] if isinstance(d, dict) and d.get("reason")]
        if reasons:
            message = f"{message} ({', '.join(reasons)})"
        return message

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        parts = []
        for candidate in data.get("candidates") or []:
            content = candidate.get("content") or {}
            for part in content.get("parts") or []:
                text = part.get("text")
                if text:
                    parts.append(text)
            if parts:
                break
        return "".join(parts).strip()

    async def generate(self, model_id: str, prompt: str) -> str:
        url = f"{self.base_url}/models/{model_id}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            resp = await self._client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise ProviderError(f"Transport error: {type(e).__name__}", model=model_id) from e

        if resp.status_code >= 400:
            raise ProviderError(self._error_message(resp), status_code=resp.status_code, model=model_id)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("Invalid JSON from provider", status_code=resp.status_code, model=model_id) from e
        return self._extract_text(data)

    async def aclose(self) -> None:
        await self._client.aclose()
