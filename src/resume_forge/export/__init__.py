"""PDF compilation for resume-forge."""
from resume_forge.export.compiler import (
    CompilationClient,
    CompiledDocument,
    LocalLatexCompiler,
    create_compiler,
)

__all__ = ["CompilationClient", "CompiledDocument", "LocalLatexCompiler", "create_compiler"]
