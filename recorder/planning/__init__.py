# recorder/planning/__init__.py
from .units import InstallableUnit, PlannedStep, unitFromPluginFile
from .planner import planUnits
