"""
Scale Version Graph Engine

Manages versioned definitions of a psychometric instrument: one root
scale plus a tree of adapted branches, each tracked for semantic drift
against the scale it was derived from.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering, canvases or pixel output
    - The transport to the generative text service
    - Questionnaire delivery or scoring

This package defines FAMILY STRUCTURE only.

ScaleStore is the only component that mutates a family.
Externally-generated content is validated before anything is built from it.
"""

__version__ = "0.1.0"
