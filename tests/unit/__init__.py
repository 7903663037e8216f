"""Unit tests for individual components in isolation.

Coverage:
    - models/: Pydantic validation and decoding
    - relay/: Log, accumulator, merging, driver, flush loop and session
    - rendering/: Fragment templates
    - config: Environment loading and validation

Uses the scripted provider and fake transport instead of network services.
"""
