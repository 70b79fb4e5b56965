"""Data models for the resume generation pipeline."""

from resume_forge.models.adapter import ADAPTER_VERSION, content_to_ir
from resume_forge.models.content import ResumeContent, normalize_extracted_content
from resume_forge.models.ir import (
    SECTION_KINDS,
    Bullet,
    PatchOp,
    ResumeIR,
    Section,
    apply_patch,
)

__all__ = [
    "ADAPTER_VERSION",
    "Bullet",
    "PatchOp",
    "ResumeContent",
    "ResumeIR",
    "SECTION_KINDS",
    "Section",
    "apply_patch",
    "content_to_ir",
    "normalize_extracted_content",
]
