#!/usr/bin/env python
"""
Providers command - List registered providers and their models.
"""

from __future__ import annotations

from typing import Optional

from structura.cli.formatting.output import ConsoleOutput
from structura.llm.providers import registry
from structura.llm.types import PROVIDER_KEY_ENV, PROVIDER_MODELS, ProviderIdentity, default_model


def run(output: Optional[ConsoleOutput] = None) -> int:
    """Run the providers command."""
    console = output or ConsoleOutput()
    rows = []
    for name in registry.list_providers():
        provider = ProviderIdentity(name)
        models = ", ".join(PROVIDER_MODELS[provider])
        rows.append((name, default_model(provider), models, " / ".join(PROVIDER_KEY_ENV[provider])))
    console.print_table("Providers", ["Provider", "Default model", "Models", "Key variable"], rows)
    return 0
