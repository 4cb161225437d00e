"""Leave Workflow package.

This package is organized by feature modules (users, ledger, leaves, workflow,
reports) with a thin Flask controller layer and service/repository layers.
"""
