"""D-ID API client for image upload, talk creation, and status polling."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import DEFAULT_DID_API_URL, GeneratorConfig, is_placeholder
from ..errors import ConfigurationError, ProviderError
from ..types import (
    Emotion,
    ImageFile,
    ImageReference,
    InlinedImage,
    JobState,
    JobStatus,
    Language,
    UploadedImage,
    VoiceSettings,
)
from ..utils.files import to_data_url
from .voices import resolve_language, select_voice_id, voice_pitch, voice_rate, voice_style

logger = logging.getLogger(__name__)

TTS_PROVIDER = "microsoft"
OUTPUT_CONFIG: Dict[str, Any] = {
    "fluent": True,
    "pad_audio": 0.0,
    "stitch": True,
    "result_format": "mp4",
}


class DIDClient:
    """Handles communication with the D-ID talks API.

    The client owns its credential and base URL; nothing is read from the
    process environment here. An ``httpx.AsyncClient`` can be injected so
    tests can route requests through ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = DEFAULT_DID_API_URL,
        *,
        timeout: float = 60.0,
        auth_scheme: str = "Basic",
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = (api_url or DEFAULT_DID_API_URL).rstrip("/")
        self._timeout = timeout
        self._auth_scheme = auth_scheme
        self._client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_config(cls, config: GeneratorConfig, **kwargs: Any) -> "DIDClient":
        return cls(
            api_key=config.did_api_key,
            api_url=config.did_api_url,
            timeout=config.request_timeout,
            **kwargs,
        )

    async def __aenter__(self) -> "DIDClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def ensure_configured(self) -> None:
        if is_placeholder(self._api_key):
            raise ConfigurationError(
                "D-ID API key is required for real video generation. Set DID_API_KEY in your environment."
            )

    async def prepare_image(self, image: ImageFile) -> ImageReference:
        """Upload the photo, degrading to an inline data URL when the upload is refused."""
        mime_type = image.mime_type or "application/octet-stream"
        try:
            response = await self._request("POST", "/images", files={"image": (image.name, image.data, mime_type)})
            data = self._json(response)
        except ProviderError as exc:
            logger.warning("D-ID image upload failed, embedding photo inline: %s", exc)
            return InlinedImage(to_data_url(image.data, mime_type))

        reference = data.get("url") or data.get("id")
        if not reference:
            logger.warning("D-ID image upload returned no url or id, embedding photo inline: %s", data)
            return InlinedImage(to_data_url(image.data, mime_type))
        logger.info("Uploaded %s (%d bytes) to D-ID", image.name, image.size)
        return UploadedImage(str(reference))

    def build_talk_payload(
        self,
        image_ref: ImageReference,
        script: str,
        emotion: Emotion,
        voice_settings: Optional[VoiceSettings],
        language: Language,
    ) -> Dict[str, Any]:
        """Translate domain settings into the ``POST /talks`` body."""
        resolved_language = resolve_language(script, language)
        voice_id = select_voice_id(
            emotion.id,
            voice_settings.gender if voice_settings else None,
            resolved_language,
            voice_settings.voice_id if voice_settings else None,
        )
        return {
            "script": {
                "type": "text",
                "subtitles": False,
                "provider": {
                    "type": TTS_PROVIDER,
                    "voice_id": voice_id,
                    "voice_config": {
                        "style": voice_style(emotion.id),
                        "rate": voice_rate(voice_settings.speed if voice_settings else None),
                        "pitch": voice_pitch(voice_settings.pitch if voice_settings else None),
                    },
                },
                "ssml": False,
                "input": script,
            },
            "config": dict(OUTPUT_CONFIG),
            "source_url": image_ref.source_url,
        }

    async def submit_job(
        self,
        image_ref: ImageReference,
        script: str,
        emotion: Emotion,
        voice_settings: Optional[VoiceSettings],
        language: Language,
    ) -> str:
        """Create a talk and return its identifier."""
        payload = self.build_talk_payload(image_ref, script, emotion, voice_settings, language)
        response = await self._request("POST", "/talks", json=payload)
        data = self._json(response)
        talk_id = data.get("id")
        if not talk_id:
            raise ProviderError(f"D-ID talk response missing id: {data}", response.status_code, response.text)
        logger.info("Created D-ID talk %s with voice %s", talk_id, payload["script"]["provider"]["voice_id"])
        return str(talk_id)

    async def poll_job(self, job_id: str) -> JobStatus:
        response = await self._request("GET", f"/talks/{job_id}")
        data = self._json(response)
        raw_status = str(data.get("status") or "").lower()
        try:
            state = JobState(raw_status)
        except ValueError:
            logger.debug("Treating unknown D-ID status %r as started", raw_status)
            state = JobState.STARTED
        return JobStatus(
            state=state,
            result_url=data.get("result_url"),
            audio_url=data.get("audio_url"),
            error_detail=self._error_detail(data),
        )

    async def validate_api_key(self) -> bool:
        """Return False only when D-ID rejects the credential outright."""
        try:
            response = await self._http().get(self._url("/talks"), headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("D-ID key check failed: %s", exc)
            return False
        return response.status_code != 401

    async def get_usage_info(self) -> Optional[Dict[str, Any]]:
        """Return the account's credit information, or None if unavailable."""
        try:
            response = await self._request("GET", "/credits")
            return self._json(response)
        except ProviderError as exc:
            logger.warning("Failed to get D-ID usage info: %s", exc)
            return None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def _url(self, path: str) -> str:
        return f"{self._api_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"{self._auth_scheme} {self._api_key}",
            "Accept": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self._url(path)
        try:
            response = await self._http().request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise ProviderError(f"D-ID request {method} {path} failed: {exc}") from exc

        if not response.is_success:
            raise ProviderError(
                f"D-ID API failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"D-ID returned invalid JSON: {response.text[:200]}", response.status_code, response.text
            ) from exc
        if not isinstance(data, dict):
            raise ProviderError(f"D-ID returned unexpected payload: {data!r}", response.status_code, response.text)
        return data

    @staticmethod
    def _error_detail(data: Dict[str, Any]) -> Optional[str]:
        error = data.get("error")
        if isinstance(error, dict):
            detail = error.get("description") or error.get("message") or error.get("kind")
            return str(detail) if detail else None
        if isinstance(error, str) and error:
            return error
        return None
