"""
iconsync: extract icons from design documents and publish them as a manifest.

Pipeline:
- extraction: find 24x24 component instances and export them as SVG
- naming: give every icon a unique, filesystem-safe slug
- manifest: wrap the icon groups into a timestamped JSON document
- connectors: create or update the manifest in a GitHub repository
- runner: sequence the stages and report one terminal result
"""

__version__ = "1.0.0"
