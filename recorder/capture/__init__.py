# recorder/capture/__init__.py
from .classify import CaptureFilter, classifyStatement
from .log import MutationCaptureLog
from .models import CapturedMutation, CaptureState, ClearOutcome
from .store import InMemoryMutationStore, Json5FileMutationStore
