"""
ERP Kernel - Purchase Ledger & Inventory Costing

A small-business ERP core with:
- Atomic purchase invoice ingestion
- Proportional allocation of freight, tax and other costs
- Perpetual weighted-average product costing
- Reversible invoices (delete-and-recompute)
- Ledger reclassification when a product leaves the resale flow
"""

__version__ = "0.1.0"
