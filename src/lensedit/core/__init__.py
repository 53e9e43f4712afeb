"""
Core modules for lensedit.

This package contains the core logic for:
- Configuration management
- Encoding input images for transport
- Calling the Gemini image-editing model
- Owning the editing session state
"""
