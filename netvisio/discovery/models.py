"""Pydantic models and enums for topology discovery."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DeviceKind(str, Enum):
    ROUTER = "ROUTER"
    SWITCH = "SWITCH"
    PC = "PC"
    SERVER = "SERVER"
    PRINTER = "PRINTER"
    MOBILE = "MOBILE"
    IOT = "IOT"
    CLOUD = "CLOUD"


class DeviceState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    WARNING = "warning"


class Device(BaseModel):
    """A discovered or synthesized network node.

    Instances are immutable; topology repair and refresh produce copies.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    address: str
    hardware_address: str = ""
    display_name: str = ""
    vendor: str = "Unknown"
    kind: DeviceKind = DeviceKind.PC
    parent_id: Optional[str] = None
    state: DeviceState = DeviceState.ONLINE
    latency_ms: Optional[float] = None


class WanHop(BaseModel):
    hop_number: int
    address: str
    hostname: str = ""
    latency_ms: float = 0.0
    location: Optional[str] = None


class OptimizationResult(BaseModel):
    explanation: str
    topology: list[Device] = Field(default_factory=list)


class ProbeOutcome(str, Enum):
    RESPONDED = "responded"  # any HTTP answer
    REFUSED = "refused"  # fast connection failure, a TCP stack answered
    TIMEOUT = "timeout"  # nothing before the deadline


class ProbeResult(BaseModel):
    address: str
    outcome: ProbeOutcome
    elapsed_ms: float = 0.0
