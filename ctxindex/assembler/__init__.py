"""Final markdown assembly."""

from .assembler import Concept, OutputAssembler, Pattern

__all__ = ["Concept", "OutputAssembler", "Pattern"]
