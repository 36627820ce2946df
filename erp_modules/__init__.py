"""
ERP modules -- workflow facades over the kernel.

Each module service owns the transaction boundary of its public operations:
kernel services flush, the facade commits on success and rolls back on any
failure before re-raising.
"""
