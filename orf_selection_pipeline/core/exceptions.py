#!/usr/bin/env python3

"""
Custom exceptions for the ORF selection pipeline.

Provides specific exception types so callers can tell precondition problems
apart from external stage failures without parsing messages.
"""

from typing import Optional, Sequence


class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class PreconditionError(PipelineError):
    """A required input, directory or file is missing before a stage can run."""
    
    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
    
    def __str__(self):
        if self.path:
            return f"{super().__str__()}: {self.path}"
        return super().__str__()


class ToolNotFoundError(PreconditionError):
    """A required external executable could not be resolved."""
    
    def __init__(self, tool_name: str, executable: str):
        super().__init__(f"Cannot locate executable '{executable}' for tool '{tool_name}'")
        self.tool_name = tool_name
        self.executable = executable


class ParseError(PipelineError):
    """Error occurred during file parsing."""
    
    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number
    
    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class StageError(PipelineError):
    """A pipeline stage failed, either via a non-zero exit or a raised error."""
    
    def __init__(self, stage_name: str, message: str = "",
                 command: Optional[Sequence[str]] = None,
                 returncode: Optional[int] = None):
        super().__init__(message or "stage failed")
        self.stage_name = stage_name
        self.command = list(command) if command else []
        self.returncode = returncode
    
    def __str__(self):
        text = f"Stage '{self.stage_name}' failed: {super().__str__()}"
        if self.command:
            text += f" (command: {' '.join(self.command)})"
        if self.returncode is not None:
            text += f" (exit status {self.returncode})"
        return text
