"""
Core modules for logosmith.

This package contains the core business logic for:
- Configuration management
- The artifact store
- Raster enhancement and synthetic logo rendering
- Instruction building and remote generation
- Tier orchestration
"""
