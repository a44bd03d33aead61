from .tracker import ReimbursementTracker

__version__ = "1.5.0"

__all__ = ["ReimbursementTracker"]
