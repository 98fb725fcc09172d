# recorder/blueprint/__init__.py
from .assembler import AssemblyResult, BlueprintContext, BlueprintSettings, ManifestAssembler, SkippedItem
from .models import Blueprint, Step
