"""
Slycer - split online video audio into per-chapter tracks.

Downloads the audio of a video with yt-dlp, reads its chapter list and cuts
one file per chapter with FFmpeg: input classification → download →
chapter extraction → filename derivation → track splitting.
"""

__version__ = "0.1.0"
