"""tools module init"""
from cazt.tools.toolkit import CaztToolkit

__all__ = ["CaztToolkit"]
