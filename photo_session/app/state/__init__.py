from .adjustment_state import AdjustmentState

__all__ = ["AdjustmentState"]
