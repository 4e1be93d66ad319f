"""
GSE - Generative Struggle Engine

Real-time estimation of a typist's cognitive state (Flow / Incubation /
Stuck) from keystroke timing and correction patterns.
"""

__version__ = "1.0.0"
