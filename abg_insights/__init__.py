"""
ABG Insights - arterial blood-gas analysis with AI-generated interpretation.
"""
__version__ = "1.0.0"
