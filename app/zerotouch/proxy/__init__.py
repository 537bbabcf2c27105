"""Proxy configuration: synthesis, storage and reload orchestration.

This module turns classification verdicts into nginx location blocks,
keeps them in a staged/committed store and applies assembled snapshots
to the live proxy with rollback.
"""

from zerotouch.proxy.control import NginxController, ProxyController
from zerotouch.proxy.models import ConfigBlock, ConfigSnapshot
from zerotouch.proxy.orchestrator import ReloadOrchestrator, ReloadState
from zerotouch.proxy.store import ConfigStore
from zerotouch.proxy.synthesizer import (
    ConfigSynthesizer,
    find_location_collisions,
    sanitize_location,
)

__all__ = [
    "ConfigBlock",
    "ConfigSnapshot",
    "ConfigStore",
    "ConfigSynthesizer",
    "NginxController",
    "ProxyController",
    "ReloadOrchestrator",
    "ReloadState",
    "find_location_collisions",
    "sanitize_location",
]
