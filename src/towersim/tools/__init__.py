"""Optional helpers around the engine.

Contains the opt-in timing hooks used by the pipeline (:mod:`debug`) and
the headless Matplotlib renderer (:mod:`plotter`) used by the CLI.
"""
