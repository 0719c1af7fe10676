"""
Core Asset Synchronization Engine
=================================

This package contains the business logic of the Quantum Asset Toolbox: the
HTTP transfer client, the catalog repository and search, the materializer
that places downloaded assets into the workspace, and the orchestrator that
ties them into the Upload, Refresh and Download operations.
"""
