"""shvss - one timeline for video channels on Rumble, Odysee and YouTube."""

PROGRAM_NAME = "shvss"
__version__ = "0.1.3"
