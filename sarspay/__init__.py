"""SARS Pay - South African payroll tax calculations."""

__version__ = "0.3.0"
