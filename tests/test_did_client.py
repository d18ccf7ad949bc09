"""Tests for the D-ID client using an in-process HTTP transport."""

from __future__ import annotations

import json
import unittest
from typing import Callable, List

import httpx

from fakes import make_png

from tavgen.errors import ConfigurationError, ProviderError
from tavgen.services.did import DIDClient
from tavgen.types import (
    Gender,
    InlinedImage,
    JobState,
    Language,
    UploadedImage,
    VoiceSettings,
    get_emotion,
)

Handler = Callable[[httpx.Request], httpx.Response]


class DIDClientTest(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests: List[httpx.Request] = []

    def _client(self, handler: Handler, api_key: str = "user:secret") -> DIDClient:
        def recording(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording))
        self.addAsyncCleanup(http_client.aclose)
        return DIDClient(api_key=api_key, api_url="https://api.d-id.test/", http_client=http_client)

    async def test_upload_returns_provider_url(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"url": "s3://d-id/face.png"}))

        ref = await client.prepare_image(make_png())

        self.assertEqual(ref, UploadedImage("s3://d-id/face.png"))
        request = self.requests[0]
        self.assertEqual(str(request.url), "https://api.d-id.test/images")
        self.assertEqual(request.headers["Authorization"], "Basic user:secret")
        self.assertIn(b'name="image"', request.content)

    async def test_upload_failure_falls_back_to_data_url(self) -> None:
        client = self._client(lambda request: httpx.Response(500, text="storage down"))

        ref = await client.prepare_image(make_png())

        self.assertIsInstance(ref, InlinedImage)
        self.assertTrue(ref.source_url.startswith("data:image/png;base64,"))

    async def test_upload_without_reference_falls_back(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"status": "ok"}))

        ref = await client.prepare_image(make_png())

        self.assertIsInstance(ref, InlinedImage)

    async def test_submit_job_builds_talk_payload(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"id": "tlk_abc", "status": "created"}))
        settings = VoiceSettings(pitch=1.2, speed=1.3, emotion="happy", gender=Gender.MALE)

        talk_id = await client.submit_job(
            UploadedImage("s3://d-id/face.png"),
            "Hello there, friends!",
            get_emotion("happy"),
            settings,
            Language.ENGLISH,
        )

        self.assertEqual(talk_id, "tlk_abc")
        body = json.loads(self.requests[0].content)
        provider = body["script"]["provider"]
        self.assertEqual(provider["type"], "microsoft")
        self.assertEqual(provider["voice_id"], "en-US-JasonNeural")
        self.assertEqual(provider["voice_config"], {"style": "cheerful", "rate": "fast", "pitch": "high"})
        self.assertEqual(body["script"]["input"], "Hello there, friends!")
        self.assertEqual(body["script"]["type"], "text")
        self.assertEqual(body["source_url"], "s3://d-id/face.png")
        self.assertEqual(body["config"]["result_format"], "mp4")
        self.assertTrue(body["config"]["stitch"])

    async def test_submit_job_prefers_explicit_voice(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"id": "tlk_abc"}))
        settings = VoiceSettings(gender=Gender.MALE, voice_id="en-GB-SoniaNeural")

        await client.submit_job(
            UploadedImage("s3://x"), "Good evening to all.", get_emotion("calm"), settings, Language.ENGLISH
        )

        body = json.loads(self.requests[0].content)
        self.assertEqual(body["script"]["provider"]["voice_id"], "en-GB-SoniaNeural")

    async def test_tamil_script_selects_tamil_voice(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"id": "tlk_ta"}))
        settings = VoiceSettings(gender=Gender.FEMALE)

        await client.submit_job(
            UploadedImage("s3://x"), "வணக்கம் நண்பர்களே", get_emotion("happy"), settings, Language.ENGLISH
        )

        body = json.loads(self.requests[0].content)
        self.assertEqual(body["script"]["provider"]["voice_id"], "ta-IN-PallaviNeural")

    async def test_submit_job_surfaces_http_errors(self) -> None:
        client = self._client(lambda request: httpx.Response(400, text='{"kind":"ValidationError"}'))

        with self.assertRaises(ProviderError) as ctx:
            await client.submit_job(
                UploadedImage("s3://x"), "Hello there, friends!", get_emotion("happy"), None, Language.ENGLISH
            )

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("400", str(ctx.exception))
        self.assertIn("ValidationError", ctx.exception.body)

    async def test_submit_job_requires_id(self) -> None:
        client = self._client(lambda request: httpx.Response(201, json={"status": "created"}))

        with self.assertRaises(ProviderError):
            await client.submit_job(
                UploadedImage("s3://x"), "Hello there, friends!", get_emotion("happy"), None, Language.ENGLISH
            )

    async def test_poll_job_parses_done(self) -> None:
        client = self._client(
            lambda request: httpx.Response(
                200,
                json={"id": "tlk_abc", "status": "done", "result_url": "https://cdn/talk.mp4", "audio_url": "https://cdn/a.wav"},
            )
        )

        job = await client.poll_job("tlk_abc")

        self.assertEqual(str(self.requests[0].url), "https://api.d-id.test/talks/tlk_abc")
        self.assertEqual(job.state, JobState.DONE)
        self.assertEqual(job.result_url, "https://cdn/talk.mp4")
        self.assertEqual(job.audio_url, "https://cdn/a.wav")

    async def test_poll_job_reads_error_description(self) -> None:
        client = self._client(
            lambda request: httpx.Response(
                200, json={"status": "error", "error": {"kind": "FaceError", "description": "No face found"}}
            )
        )

        job = await client.poll_job("tlk_abc")

        self.assertEqual(job.state, JobState.ERROR)
        self.assertEqual(job.error_detail, "No face found")

    async def test_poll_job_treats_unknown_status_as_started(self) -> None:
        client = self._client(lambda request: httpx.Response(200, json={"status": "queued"}))

        job = await client.poll_job("tlk_abc")

        self.assertEqual(job.state, JobState.STARTED)

    async def test_transport_errors_become_provider_errors(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = self._client(refuse)

        with self.assertRaises(ProviderError):
            await client.poll_job("tlk_abc")

    async def test_validate_api_key(self) -> None:
        rejected = self._client(lambda request: httpx.Response(401, json={"message": "Unauthorized"}))
        accepted = self._client(lambda request: httpx.Response(200, json={"talks": []}))

        self.assertFalse(await rejected.validate_api_key())
        self.assertTrue(await accepted.validate_api_key())

    async def test_usage_info_is_none_on_failure(self) -> None:
        client = self._client(lambda request: httpx.Response(403, text="forbidden"))

        self.assertIsNone(await client.get_usage_info())

    async def test_usage_info_returns_payload(self) -> None:
        client = self._client(lambda request: httpx.Response(200, json={"remaining": 12, "total": 20}))

        self.assertEqual(await client.get_usage_info(), {"remaining": 12, "total": 20})

    def test_placeholder_key_is_not_configured(self) -> None:
        for key in (None, "", "your_did_api_key_here"):
            with self.subTest(key=key):
                with self.assertRaises(ConfigurationError):
                    DIDClient(api_key=key).ensure_configured()
        DIDClient(api_key="user:secret").ensure_configured()

    async def test_aclose_leaves_injected_client_open(self) -> None:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        self.addAsyncCleanup(http_client.aclose)

        async with DIDClient(api_key="k", http_client=http_client):
            pass

        self.assertFalse(http_client.is_closed)


if __name__ == "__main__":
    unittest.main()
