"""MLB home run prop odds tracker."""
__version__ = "1.0.0"
