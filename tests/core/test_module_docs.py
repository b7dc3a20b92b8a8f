"""
Module docstring guardrail tests.

Public infrastructure modules end their docstring with ``Tags:`` and
``Doc-Types:`` sections so the docs index can classify them.
"""

import importlib

import pytest

DOCUMENTED_MODULES = [
    "notebridge.api.app",
    "notebridge.api.deps",
    "notebridge.api.middleware.errors",
    "notebridge.api.middleware.rate_limit",
    "notebridge.api.middleware.request_context",
    "notebridge.api.schemas.common",
    "notebridge.core.settings",
    "notebridge.core.logging",
    "notebridge.core.errors",
    "notebridge.core.database",
    "notebridge.core.security",
    "notebridge.core.storage",
    "notebridge.core.orm.base",
    "notebridge.ai.watsonx",
]


class TestModuleDocstrings:
    @pytest.mark.parametrize("name", DOCUMENTED_MODULES)
    def test_has_tags_and_doc_types(self, name):
        doc = importlib.import_module(name).__doc__ or ""
        assert "\nTags:\n    notebridge, " in doc, name
        assert "\nDoc-Types:\n    " in doc, name
        assert doc.index("Tags:") < doc.index("Doc-Types:"), name
