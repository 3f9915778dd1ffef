"""AccessMatrix - plan IAM bindings from a declarative access matrix."""

__version__ = "0.1.0"
