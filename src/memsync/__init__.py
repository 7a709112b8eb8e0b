"""memsync: keep one myAI Memory document in sync across client tools."""

__version__ = "0.1.0"
