"""Test package for Wild Realms.

This package contains unit tests for the deterministic core modules
(wander steering, mini-game, quiz, challenge, population scenarios) plus
scripted headless simulations of the immersive scenes and smoke tests for
the pygame UI. The UI tests run headlessly using pygame's dummy video
driver to avoid opening real windows. To run these tests, execute
``pytest`` from the project root.
"""
