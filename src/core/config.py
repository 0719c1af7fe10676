"""
Application Configuration and Constants
=======================================

This module contains the global configuration values, constants, and defaults used
throughout the Quantum Asset Toolbox. It serves as a single source of truth for:

- Remote endpoints for the asset catalog and uploads
- Network timeout parameters
- Local workspace folder layout
- Asset file extensions that receive special handling

Note:
    All constants use UPPER_SNAKE_CASE naming convention. Modify these values to
    change application-wide behavior without touching business logic.

Author: Quantum Asset Toolbox Project
"""

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

APP_NAME = "Quantum Asset Toolbox"
APP_VERSION = "1.0.0"

# ============================================================================
# REMOTE ENDPOINTS
# ============================================================================
# The catalog server exposes two PHP endpoints: one returning the JSON asset
# listing and one accepting multipart uploads.

DEFAULT_UPLOAD_URL = "https://quantumleapstudios.org/upload.php"
DEFAULT_FETCH_URL = "https://quantumleapstudios.org/assets.php"

# Multipart form field carrying the uploaded file
UPLOAD_FORM_FIELD = "file"

USER_AGENT = f"QuantumAssetToolbox/{APP_VERSION}"

# ============================================================================
# NETWORK CONFIGURATION
# ============================================================================

# Maximum time to wait for network responses before timing out
NETWORK_TIMEOUT_SECONDS = 30

# Number of transfers (uploads, refreshes, downloads) allowed to run at once
MAX_PARALLEL_TRANSFERS = 4

# ============================================================================
# LOCAL WORKSPACE LAYOUT
# ============================================================================
# Downloaded assets land under <workspace>/QuantumAssetToolbox. Plain files go
# to the DownloadedAssets subfolder, archives are unpacked next to it into a
# folder named after the archive.

TOOLBOX_DIR_NAME = "QuantumAssetToolbox"
DOWNLOADED_ASSETS_DIR_NAME = "DownloadedAssets"

# Default workspace is the current directory (the host project's Assets folder
# when launched from inside a Unity project)
DEFAULT_WORKSPACE_ROOT = "."

# ============================================================================
# ASSET CLASSIFICATION
# ============================================================================
# Extensions are compared case-insensitively.

PACKAGE_ARCHIVE_EXTENSIONS = (".unitypackage",)
ZIP_ARCHIVE_EXTENSIONS = (".zip",)

# ============================================================================
# PACKAGE IMPORT
# ============================================================================

# Environment variable pointing at the Unity editor binary
UNITY_EXECUTABLE_ENV = "UNITY_EXECUTABLE"

# Importing a large package in batch mode can take several minutes
PACKAGE_IMPORT_TIMEOUT_SECONDS = 600
