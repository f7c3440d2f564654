"""Signal and system analysis (sampling plans, FFT, s- and z-domain).

Modules here are pure functions over NumPy arrays and small frozen
dataclasses. They hold no session state, so the analysis pipeline can run
them for several sensors at once.
"""
