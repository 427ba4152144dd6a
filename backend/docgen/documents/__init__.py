from docgen.documents.council_minutes import CouncilMinutesGenerator
from docgen.documents.work_plan import WorkPlanGenerator

__all__ = ["CouncilMinutesGenerator", "WorkPlanGenerator"]
