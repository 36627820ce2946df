"""Pure domain types for the ERP kernel (no I/O)."""
