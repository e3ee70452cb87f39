"""
Webber: Sketch-to-Website Generation

Turns a hand-drawn wireframe into a live HTML/CSS/JS preview using a
multimodal Large Language Model, with a downloadable zip export.
"""

__version__ = "0.1.0"
