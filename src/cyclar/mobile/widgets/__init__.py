"""Widget modules for cyclAR mobile UI."""

from .live_button import LiveButton
from .step_list import StepList, StepRow

__all__ = ["LiveButton", "StepList", "StepRow"]
