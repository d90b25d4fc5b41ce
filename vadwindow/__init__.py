"""vadwindow — sliding-window speech detection over WebRTC VAD frames."""

__version__ = "0.1.0"
