"""
Utilities Package
Gas pricing and gas limit helpers
"""

from .gas_calculator import GasCalculator

__all__ = ['GasCalculator']
