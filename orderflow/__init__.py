"""
                Orderflow

Order-placement pipeline for caterers and restaurants: basket validation
against date-scoped availability, payment capture, single-shot order
submission and a seller-driven status lifecycle, plus the async orders
service the pipeline submits to.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
