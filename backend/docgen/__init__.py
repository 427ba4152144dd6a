"""
docgen — document generation pipeline.

    from docgen import DocumentGenerator

    ctx = DocumentGenerator("Class report", "REPORT").generate({"class": "1A"})
"""

from docgen.collaborators import Collaborators
from docgen.generator import DocumentGenerator
from docgen.pipeline import GenerationContext, GenerationStep, Pipeline

__all__ = [
    "Collaborators",
    "DocumentGenerator",
    "GenerationContext",
    "GenerationStep",
    "Pipeline",
]
