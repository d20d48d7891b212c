"""Orchestrator transport components.

- Settings loaded from .env
- Structured logging
- Protobuf wire messages
- Local telemetry probes
- The async HTTP client and a small CLI surface
"""
