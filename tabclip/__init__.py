from .rules import VERSION

__version__ = VERSION
