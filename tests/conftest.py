#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Test fixtures
=============
Each test gets its own MacroRegistry and a Preprocessor bound to it, so no
macro definition leaks between tests.  The shared singleton is cleared after
every test as well, for code paths that fall back to it.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import os

import pytest

# ── Env vars must be set before importing sxpp modules ───────────────────────
os.environ.setdefault("LOG_LEVEL",           "DEBUG")
os.environ.setdefault("RECURSIVE_EXPANSION", "false")

from sxpp.core.config import Settings
from sxpp.services.dispatcher import Preprocessor
from sxpp.services.evaluator import Evaluator
from sxpp.services.macros import MacroRegistry, macro_registry


# ── Settings without .env lookups ─────────────────────────────────────────────
@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


# ── One registry per test ─────────────────────────────────────────────────────
@pytest.fixture
def registry() -> MacroRegistry:
    return MacroRegistry()


@pytest.fixture
def evaluator(registry: MacroRegistry) -> Evaluator:
    return Evaluator(registry)


# ── Preprocessor factory: default prefix table unless overridden ─────────────
@pytest.fixture
def make_pp(registry: MacroRegistry, settings: Settings):
    def _make(**kwargs) -> Preprocessor:
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("settings", settings)
        return Preprocessor(**kwargs)
    return _make


# ── Reset the shared singleton after each test ────────────────────────────────
@pytest.fixture(autouse=True)
def clean_shared_registry():
    yield
    macro_registry.clear()


# -----------------------------------------------------------------------------
