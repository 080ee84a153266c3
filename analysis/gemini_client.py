"""Gemini client for frame analysis and safety directives.

Both calls are best-effort. Network errors, missing credentials, empty
responses and malformed JSON never reach the caller: the frame analysis
degrades to ``None`` and the directive to a fixed fallback sentence. Each
absorbed failure is reported with `warnings.warn`.
"""

from __future__ import annotations

import json
import os
import re
import warnings
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from telemetry.state import TrackStatus

DEFAULT_MODEL = "gemini-3-flash-preview"

FRAME_PROMPT = (
    "Analyze this railway track camera feed. Detect any intrusions (humans, animals, objects), "
    "check for track visible faults, and estimate visibility/fog levels. Provide a JSON response."
)

EMPTY_DIRECTIVE = "Continue operations with standard caution."
FAILED_DIRECTIVE = "System monitoring active."

ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "assessment": types.Schema(type=types.Type.STRING, description="Overall safety summary"),
        "hazardProbability": types.Schema(
            type=types.Type.NUMBER, description="Likelihood of an incident 0-100"
        ),
        "recommendations": types.Schema(
            type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)
        ),
        "detectedObjects": types.Schema(
            type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)
        ),
    },
    required=["assessment", "hazardProbability", "recommendations", "detectedObjects"],
)


class AnalysisResult(BaseModel):
    """Structured hazard assessment returned for one frame."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    assessment: str
    hazard_probability: float = Field(alias="hazardProbability")
    recommendations: List[str]
    detected_objects: List[str] = Field(alias="detectedObjects")


def _extract_json(text: str) -> Optional[Dict[str, Any]]:
    text = text.strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Models occasionally wrap the object in prose or a code fence.
        m = re.search(r"\{.*\}", text, re.S)
        if not m:
            return None
        try:
            data = json.loads(m.group(0))
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def parse_analysis(text: Optional[str]) -> Optional[AnalysisResult]:
    """Parse the model's JSON answer; None if it is missing or malformed."""
    if not text:
        return None
    data = _extract_json(text)
    if data is None:
        return None
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError:
        return None


def directive_prompt(status: TrackStatus) -> str:
    return (
        f"Current Rail Status: Fog {status.fog_level:.1f}%, Health {status.track_health:.1f}%, "
        f"Speed {status.speed:.0f}km/h. Generate a concise safety directive for the pilot."
    )


class RemoteAnalysisClient:
    """Thin async wrapper around ``google.genai``.

    Parameters
    ----------
    model : str, optional
        Gemini model name used for both requests.
    api_key : str, optional
        Explicit API key. Falls back to the ``api_key_env`` variable.
    api_key_env : str, optional
        Environment variable holding the key.
    client : genai.Client, optional
        Pre-built client (tests inject a fake here). When omitted the
        client is created on first use, so a missing key only fails the
        individual request.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        api_key_env: str = "GEMINI_API_KEY",
        client: Any = None,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.api_key_env = api_key_env
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            key = self.api_key or os.getenv(self.api_key_env)
            if not key:
                raise RuntimeError(f"Missing API key; set {self.api_key_env}")
            self._client = genai.Client(api_key=key)
        return self._client

    async def analyze_frame(self, jpeg: bytes) -> Optional[AnalysisResult]:
        """Request a hazard assessment for a JPEG-encoded frame."""
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Part.from_bytes(data=jpeg, mime_type="image/jpeg"),
                    FRAME_PROMPT,
                ],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=ANALYSIS_SCHEMA,
                ),
            )
            text = response.text
        except Exception as exc:
            warnings.warn(f"Safety analysis failed: {exc}", stacklevel=2)
            return None
        result = parse_analysis(text)
        if result is None:
            warnings.warn("Safety analysis returned no usable JSON", stacklevel=2)
        return result

    async def safety_directive(self, status: TrackStatus) -> str:
        """Ask for a one-line directive for the train pilot."""
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=directive_prompt(status),
            )
            text = (response.text or "").strip()
        except Exception as exc:
            warnings.warn(f"Directive request failed: {exc}", stacklevel=2)
            return FAILED_DIRECTIVE
        return text or EMPTY_DIRECTIVE
