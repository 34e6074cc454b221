"""
Core architect package

This package contains the builder orchestration machinery:
- architect: Target resolution and the run() pipeline
- target_store: Validated per-project target maps
- builder_resolver / package_resolver: '<package>:<name>' to builder paths
- builder_cache: Builder description and constructor caches
- plugin_loader: Dynamic import of builder implementations
- schema_loader / validation: Loose JSON loading and schema validation
- cache: Keyed caches with single-flight population
- errors / result: Error taxonomy and tagged results
- config_loader: Workspace loading and CLI override parsing
"""

__version__ = "1.0.0"
