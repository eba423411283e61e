"""PorchBoard - multi-tenant city event boards"""

__version__ = "1.0.0"
