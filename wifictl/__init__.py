"""wifictl - local HTTP gateway for Wi-Fi adapter control."""

__version__ = "0.1.0"
__logo__ = "📶"
