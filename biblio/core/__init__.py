#!/usr/bin/env python

"""
    Core module for Biblio: stores, ledger and the inventory coordinator

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from biblio.core.inventory import InventoryCoordinator
from biblio.core.queries import Queries

__all__ = ["InventoryCoordinator", "Queries"]
