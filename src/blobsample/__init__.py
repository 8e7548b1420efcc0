# Azure Blob Storage Sample
"""
Walkthrough of Azure Blob Storage SDK calls: containers, block blobs,
page blobs, listings, snapshots and account shared access signatures.
"""

__version__ = "0.1.0"
