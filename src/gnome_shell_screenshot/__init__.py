"""Screenshot tool for GNOME sessions.

Captures through the shell's org.gnome.Shell.Screenshot D-Bus service:
- Desktop, window and area captures
- Notifications with Copy / Save / Open / Upload actions
- Optional Imgur upload
- Companion auxhelper CLI for one-shot D-Bus calls
"""

__version__ = "1.0.0"
