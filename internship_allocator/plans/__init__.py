from .lifecycle import PlanLifecycleManager

__all__ = ["PlanLifecycleManager"]
