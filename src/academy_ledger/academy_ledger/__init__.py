"""Academy Ledger package.

This package is organized by feature modules (roster, ledger, statistics, ...)
with a thin Flask controller layer and service/repository layers.
"""
