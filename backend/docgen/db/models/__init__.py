"""
Models package — re-exports Base and all models.

Import models here so `Base.metadata.create_all()` picks up every table.

When adding a new model:
    1. Create `docgen/db/models/<table_name>.py`
    2. Import it here
"""

from docgen.db.models.base import Base
from docgen.db.models.generated_artifact import GeneratedArtifact

__all__ = [
    "Base",
    "GeneratedArtifact",
]
