"""
VoiceGate: bilingual (English/Nepali) voice assistant backend.
"""

__version__ = "0.1.0"
