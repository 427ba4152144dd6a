from docgen.pipeline.steps.assign_permissions import AssignPermissionsStep
from docgen.pipeline.steps.configure_placeholders import ConfigurePlaceholdersStep
from docgen.pipeline.steps.create_artifact import CreateArtifactStep
from docgen.pipeline.steps.generate_name import GenerateNameStep
from docgen.pipeline.steps.persist_reference import PersistReferenceStep
from docgen.pipeline.steps.resolve_destination import ResolveDestinationStep
from docgen.pipeline.steps.select_template import SelectTemplateStep
from docgen.pipeline.steps.substitute_placeholders import SubstitutePlaceholdersStep
from docgen.pipeline.steps.update_status import UpdateStatusStep

__all__ = [
    "AssignPermissionsStep",
    "ConfigurePlaceholdersStep",
    "CreateArtifactStep",
    "GenerateNameStep",
    "PersistReferenceStep",
    "ResolveDestinationStep",
    "SelectTemplateStep",
    "SubstitutePlaceholdersStep",
    "UpdateStatusStep",
]
