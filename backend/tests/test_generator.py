"""End-to-end tests for DocumentGenerator."""

from __future__ import annotations

from docgen.collaborators import Collaborators
from docgen.collaborators.models import TemplateInfo
from docgen.generator import DocumentGenerator
from docgen.pipeline.steps import UpdateStatusStep

from conftest import GOOGLE_SHEET

CANONICAL_STEPS = [
    "resolve_destination",
    "select_template",
    "generate_name",
    "create_artifact",
    "configure_placeholders",
    "substitute_placeholders",
    "assign_permissions",
    "persist_reference",
    "update_status",
]


def make_generator(collaborators, guard, cls=DocumentGenerator, **kwargs):
    return cls("Class report", "REPORT", collaborators=collaborators, guard=guard, **kwargs)


def test_canonical_pipeline_order(collaborators, guard):
    generator = make_generator(collaborators, guard)

    assert generator.pipeline.step_names == CANONICAL_STEPS


def test_end_to_end_report(collaborators, guard):
    generator = make_generator(collaborators, guard)

    ctx = generator.generate({"type": "REPORT", "entity_key": "1A"})

    assert ctx.error is None
    assert ctx.halted_by is None
    assert ctx.class_entity.name == "1A"
    assert ctx.created_artifact.name == "Report 1A - REPORT"
    assert ctx.destination.id == "dest-1a"

    text = collaborators.store.read_document(ctx.created_artifact.id)
    assert "Report for 1A" in text
    assert "Author: Secretariat" in text

    assert len(collaborators.permissions.granted(ctx.created_artifact.id)) == 2
    assert len(collaborators.permissions.granted("dest-1a")) == 1

    record = collaborators.artifacts.find_by_id(ctx.created_artifact.id)
    assert record["name"] == "Report 1A - REPORT"
    assert record["status"] == "CREATED"
    assert record["document_type"] == "REPORT"

    logged_steps = {entry.step for entry in ctx.run_log}
    assert set(CANONICAL_STEPS) <= logged_steps


def test_input_type_overrides_generator_type(collaborators, guard):
    generator = DocumentGenerator("Anything", "SOMETHING_ELSE", collaborators=collaborators, guard=guard)

    ctx = generator.generate({"type": "REPORT", "class": "1A"})

    assert ctx.document_type == "REPORT"
    assert ctx.error is None


def test_consecutive_runs_do_not_share_values(collaborators, guard):
    generator = make_generator(collaborators, guard)

    first = generator.generate({"class": "1A"})
    second = generator.generate({"class": "5B"})

    assert first.created_artifact.name == "Report 1A - REPORT"
    assert second.created_artifact.name == "Report 5B - REPORT"
    assert second.destination.id == "dest-5b"
    assert second.selected_template.id == "tpl-report-final"
    assert collaborators.store.read_document(second.created_artifact.id) == "Final year report"
    assert first.run_id != second.run_id


def test_step_options_reach_steps(collaborators, guard):
    generator = make_generator(
        collaborators,
        guard,
        step_options={"generate_name": {"name_pattern": "Custom {{ class_name }}"}},
    )

    ctx = generator.generate({"class": "1A"})

    assert ctx.created_artifact.name == "Custom 1A"


def test_unresolved_class_warns_and_halts_at_destination(collaborators, guard, recording_logger):
    generator = make_generator(collaborators, guard)

    ctx = generator.generate({"class": "9Z"})

    assert ctx.class_entity is None
    assert any("9Z" in message for message in recording_logger.messages("WARN"))
    assert ctx.halted_by == "resolve_destination"
    assert ctx.error.step == "resolve_destination"
    assert ctx.created_artifact is None


def test_pre_run_failure_is_recorded_as_general(collaborators, guard):
    class Picky(DocumentGenerator):
        def pre_run(self, ctx):
            raise ValueError("class is not allowed")

    ctx = make_generator(collaborators, guard, cls=Picky).generate({"class": "1A"})

    assert ctx.error.step == "general"
    assert ctx.error.message == "class is not allowed"
    assert ctx.error.stack
    assert ctx.results_by_step == {}
    assert collaborators.artifacts.all() == []


def test_context_preparation_failure_is_recorded(collaborators, guard):
    class ExplodingRegistry:
        def find_by_key(self, key):
            raise RuntimeError("registry offline")

    broken = collaborators.with_overrides(classes=ExplodingRegistry())

    ctx = make_generator(broken, guard).generate({"class": "1A"})

    assert ctx.error.step == "general"
    assert "registry offline" in ctx.error.message
    assert ctx.params["class"] == "1A"


def test_post_run_sees_final_context(collaborators, guard):
    seen = []

    class Watching(DocumentGenerator):
        def post_run(self, ctx):
            seen.append(ctx.created_artifact.name if ctx.created_artifact else None)
            return ctx

    make_generator(collaborators, guard, cls=Watching).generate({"class": "1A"})

    assert seen == ["Report 1A - REPORT"]


def test_template_hook_overrides_metadata(collaborators, guard):
    class GridReport(DocumentGenerator):
        def select_template(self, ctx):
            return TemplateInfo("tpl-grid", "Grid template", GOOGLE_SHEET)

    ctx = make_generator(collaborators, guard, cls=GridReport).generate({"class": "1A"})

    assert ctx.error is None
    assert ctx.selected_template.id == "tpl-grid"
    sheets = collaborators.store.read_sheets(ctx.created_artifact.id)
    assert sheets["Summary"][0] == ["Class", "1A"]
    assert sheets["Notes"][0] == ["1A", 3]


def test_replace_step(collaborators, guard):
    propagated = []

    class Propagating(UpdateStatusStep):
        def propagate(self, ctx):
            propagated.append(ctx.created_artifact.id)

    generator = make_generator(collaborators, guard)
    generator.replace_step("update_status", Propagating(guard=guard))

    ctx = generator.generate({"class": "1A"})

    assert propagated == [ctx.created_artifact.id]


def test_store_override_through_default_bundle(collaborators, guard):
    # a store built outside default(), seeded with the same templates
    bundle = Collaborators.default(
        store=collaborators.store,
        templates=collaborators.templates,
        destinations=collaborators.destinations,
        permissions=collaborators.permissions,
        classes=collaborators.classes,
        roles=collaborators.roles,
        artifacts=collaborators.artifacts,
        document_types=collaborators.document_types,
        logger=collaborators.logger,
    )

    ctx = make_generator(bundle, guard).generate({"class": "1A"})

    assert ctx.error is None
    assert ctx.halted_by is None
    text = collaborators.store.read_document(ctx.created_artifact.id)
    assert text.startswith("Report for 1A on ")
