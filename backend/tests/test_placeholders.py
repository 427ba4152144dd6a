"""Tests for JinjaPlaceholderResolver."""

from __future__ import annotations

from datetime import datetime

import pytest

from docgen.collaborators import Collaborators
from docgen.collaborators.memory import InMemoryContentStore
from docgen.collaborators.placeholders import JinjaPlaceholderResolver
from docgen.core.config import settings
from docgen.pipeline.context import GenerationContext
from docgen.pipeline.errors import PlaceholderError
from docgen.pipeline.steps import ConfigurePlaceholdersStep


@pytest.fixture
def store() -> InMemoryContentStore:
    store = InMemoryContentStore()
    store.put_document("doc-1", "Dear {{ name }}, class {{ class_name }}.{{ missing }}")
    store.put_sheets("sheet-1", {"A": [["{{ name }}", 1]], "B": [["{{ name }}"]]})
    return store


@pytest.fixture
def resolver(store) -> JinjaPlaceholderResolver:
    return JinjaPlaceholderResolver(store)


@pytest.fixture
def ctx() -> GenerationContext:
    return GenerationContext(run_name="t", document_type="REPORT", params={"class": "2C", "name": "param"})


def test_substitute_in_string_uses_params_and_context(resolver, ctx):
    assert resolver.substitute_in_string("{{ document_type }}/{{ class_name }}/{{ name }}", ctx) == "REPORT/2C/param"


def test_registered_resolvers_win_over_params(resolver, ctx):
    resolver.register("name", lambda c: "registered")

    assert resolver.substitute_in_string("{{ name }}", ctx) == "registered"


def test_registered_resolver_returning_none_is_ignored(resolver, ctx):
    resolver.register("name", lambda c: None)

    assert resolver.substitute_in_string("{{ name }}", ctx) == "param"


def test_published_placeholder_map_is_used(resolver, ctx):
    ctx.set_result("configure_placeholders", "placeholders", {"name": "from map"})

    assert resolver.substitute_in_string("{{ name }}", ctx) == "from map"


def test_empty_pattern(resolver, ctx):
    assert resolver.substitute_in_string("", ctx) == ""


def test_process_document_renders_and_blanks_unknown(resolver, store, ctx):
    assert resolver.process_document("doc-1", ctx) is True
    assert store.read_document("doc-1") == "Dear param, class 2C."


def test_process_document_missing_file(resolver, ctx):
    assert resolver.process_document("nope", ctx) is False


def test_process_all_sheets(resolver, store, ctx):
    assert resolver.process_sheet("sheet-1", ctx) is True

    sheets = store.read_sheets("sheet-1")
    assert sheets["A"] == [["param", 1]]
    assert sheets["B"] == [["param"]]


def test_process_unknown_sheet(resolver, ctx):
    assert resolver.process_sheet("sheet-1", ctx, "Z") is False


def test_invalid_syntax_raises_placeholder_error(resolver, ctx):
    with pytest.raises(PlaceholderError):
        resolver.substitute_in_string("{{ unclosed", ctx)


def test_timestamp_matches_configured_placeholder_format(resolver, ctx, guard):
    before = resolver.substitute_in_string("{{ timestamp }}", ctx)

    ctx.collaborators = Collaborators.default(placeholders=resolver)
    assert ConfigurePlaceholdersStep(guard=guard).run(ctx)
    after = resolver.substitute_in_string("{{ timestamp }}", ctx)

    datetime.strptime(before, settings.TIMESTAMP_FORMAT)
    datetime.strptime(after, settings.TIMESTAMP_FORMAT)


@pytest.mark.parametrize(
    "template",
    [
        "{{ cycler.__init__.__globals__.os.getcwd() }}",
        "{{ ''.__class__.__mro__ }}",
    ],
)
def test_access_to_python_internals_is_refused(resolver, ctx, template):
    with pytest.raises(PlaceholderError):
        resolver.substitute_in_string(template, ctx)


def test_template_document_cannot_reach_python_internals(resolver, store, ctx):
    store.put_document("doc-evil", "{{ cycler.__init__.__globals__.os.getcwd() }}")

    with pytest.raises(PlaceholderError):
        resolver.process_document("doc-evil", ctx)
