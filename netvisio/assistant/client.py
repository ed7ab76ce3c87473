"""Gemini-backed assistant: fabricates, parses, analyzes and re-links device data.

Every call is wrapped in the retry policy from the config, and every device
list it returns has been through :func:`sanitize_topology`.
"""

from __future__ import annotations

import json
from typing import Any

import requests
from loguru import logger
from pydantic import ValidationError

from netvisio.assistant import prompts
from netvisio.config import AssistantConfig
from netvisio.discovery.models import Device, DeviceKind, DeviceState, OptimizationResult, WanHop
from netvisio.discovery.parser import parse_arp_text
from netvisio.discovery.topology import sanitize_topology
from netvisio.exceptions import ConfigurationError, RemoteCallError, TopologyError
from netvisio.retry import call_with_retry


def _clean_json(text: str) -> str:
    """Strip markdown code fences the model sometimes wraps around JSON."""
    if not text:
        return "[]"
    return text.replace("```json", "").replace("```", "").strip()


def _error_message(resp: requests.Response) -> str:
    """``STATUS: message`` from a Google API error body, else the raw text."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return f"{error.get('status', '')}: {error.get('message', resp.text)}".strip(": ")
    if isinstance(error, str):
        return error
    return resp.text


def _device_to_payload(device: Device) -> dict[str, Any]:
    return {
        "id": device.id,
        "ip": device.address,
        "mac": device.hardware_address,
        "name": device.display_name,
        "manufacturer": device.vendor,
        "type": device.kind.value,
        "parentId": device.parent_id,
        "status": device.state.value,
        "latency": device.latency_ms,
    }


def _device_from_payload(payload: dict[str, Any], position: int) -> Device:
    """Map one model-produced JSON object onto a Device.

    Unknown kinds fall back to PC and unknown states to online.
    """
    kind_raw = str(payload.get("type") or "").upper()
    state_raw = str(payload.get("status") or "").lower()
    parent = payload.get("parentId")
    return Device(
        id=str(payload.get("id") or f"ai-{position}"),
        address=str(payload.get("ip") or ""),
        hardware_address=str(payload.get("mac") or ""),
        display_name=str(payload.get("name") or payload.get("ip") or ""),
        vendor=str(payload.get("manufacturer") or "Unknown"),
        kind=DeviceKind(kind_raw) if kind_raw in DeviceKind.__members__ else DeviceKind.PC,
        parent_id=str(parent) if parent not in (None, "") else None,
        state=DeviceState(state_raw) if state_raw in {s.value for s in DeviceState} else DeviceState.ONLINE,
        latency_ms=payload.get("latency"),
    )


def _devices_from_json(data: Any) -> list[Device]:
    if not isinstance(data, list):
        raise TopologyError(f"Expected a JSON list of devices, got {type(data).__name__}")
    try:
        devices = [_device_from_payload(item, i) for i, item in enumerate(data) if isinstance(item, dict)]
    except ValidationError as e:
        raise TopologyError(f"Invalid device data from model: {e}") from e
    return sanitize_topology(devices)


class GeminiAssistant:
    """Client for the Gemini ``generateContent`` REST endpoint.

    The API key and offline flag come from the ``AssistantConfig`` given at
    construction; there is no module-level session state.
    """

    def __init__(self, config: AssistantConfig, session: requests.Session | None = None):
        self.config = config
        self._session = session or requests.Session()

    def _ensure_online(self) -> str:
        if self.config.offline:
            raise ConfigurationError("This operation needs the AI service, but offline mode is enabled")
        if not self.config.api_key:
            raise ConfigurationError("Missing API key: set GEMINI_API_KEY or API_KEY, or pass --api-key")
        return self.config.api_key

    def _generate_once(self, prompt: str, schema: dict[str, Any] | None) -> str:
        api_key = self._ensure_online()
        url = f"{self.config.base_url}/models/{self.config.model}:generateContent"
        body: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if schema is not None:
            body["generationConfig"] = {"responseMimeType": "application/json", "responseSchema": schema}

        try:
            resp = self._session.post(
                url,
                json=body,
                headers={"x-goog-api-key": api_key},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            raise RemoteCallError(f"generateContent request failed: {e}") from e

        if resp.status_code >= 400:
            raise RemoteCallError(
                f"generateContent failed ({resp.status_code}): {_error_message(resp)}", status_code=resp.status_code
            )

        try:
            data = resp.json()
            parts = data["candidates"][0]["content"]["parts"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("generateContent returned no candidates")
            return ""
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    def _generate(self, prompt: str, schema: dict[str, Any] | None = None) -> str:
        self._ensure_online()
        return call_with_retry(lambda: self._generate_once(prompt, schema), policy=self.config.retry)

    def _generate_json(self, prompt: str, schema: dict[str, Any]) -> Any:
        text = self._generate(prompt, schema)
        try:
            return json.loads(_clean_json(text))
        except json.JSONDecodeError as e:
            raise TopologyError(f"Model returned malformed JSON: {e}") from e

    def generate(self) -> list[Device]:
        """Invent a plausible small-business LAN."""
        devices = _devices_from_json(self._generate_json(prompts.GENERATE_PROMPT, prompts.DEVICE_LIST_SCHEMA))
        logger.info(f"Generated {len(devices)} device(s)")
        return devices

    def parse_text(self, raw: str) -> list[Device]:
        """Extract devices from pasted text; offline mode uses the regex parser."""
        if self.config.offline:
            logger.info("Offline mode: parsing text heuristically")
            return sanitize_topology(parse_arp_text(raw))
        if not raw.strip():
            return []
        return _devices_from_json(
            self._generate_json(prompts.PARSE_PROMPT.format(raw=raw), prompts.DEVICE_LIST_SCHEMA)
        )

    def analyze(self, devices: list[Device]) -> str:
        """Markdown assessment of bottlenecks and risks."""
        summary = [
            {"ip": d.address, "type": d.kind.value, "name": d.display_name, "manufacturer": d.vendor}
            for d in devices
        ]
        text = self._generate(prompts.ANALYZE_PROMPT.format(devices=json.dumps(summary)))
        return text or "No analysis available."

    def trace(self, target: str) -> list[WanHop]:
        """Simulated WAN path towards ``target``."""
        data = self._generate_json(prompts.TRACE_PROMPT.format(target=target), prompts.HOP_LIST_SCHEMA)
        if not isinstance(data, list):
            raise TopologyError(f"Expected a JSON list of hops, got {type(data).__name__}")
        hops: list[WanHop] = []
        for i, item in enumerate(data, start=1):
            if not isinstance(item, dict):
                continue
            try:
                hops.append(
                    WanHop(
                        hop_number=item.get("hopNumber") or i,
                        address=str(item.get("ip") or ""),
                        hostname=str(item.get("hostname") or ""),
                        latency_ms=item.get("latency") or 0.0,
                        location=item.get("location"),
                    )
                )
            except ValidationError as e:
                logger.debug(f"Skipping malformed hop {i}: {e}")
        return hops

    def optimize(self, devices: list[Device]) -> OptimizationResult:
        """Proposed re-linking of ``devices`` with an explanation."""
        payload = json.dumps([_device_to_payload(d) for d in devices])
        data = self._generate_json(prompts.OPTIMIZE_PROMPT.format(devices=payload), prompts.OPTIMIZE_SCHEMA)
        if not isinstance(data, dict):
            raise TopologyError(f"Expected a JSON object, got {type(data).__name__}")
        return OptimizationResult(
            explanation=str(data.get("explanation") or ""),
            topology=_devices_from_json(data.get("topology", [])),
        )
