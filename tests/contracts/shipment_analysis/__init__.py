"""
Shipment Analysis Service - Contracts Package

- data_contract.py: test data factory for domain objects and upstream exports
"""

from .data_contract import ShipmentAnalysisTestDataFactory

__all__ = ["ShipmentAnalysisTestDataFactory"]
