# Define minilaser specific exceptions

# Base minilaser exception
class MiniLaserError(Exception):
    pass


class BadFileError(MiniLaserError):
    """Abort loading a malformed file"""


class DeviceConnectionError(MiniLaserError, ConnectionError):
    """
    The transport is unavailable, the handshake token was not seen, or a write failed.

    This is not fatal, the caller may retry with another port.
    """


class OutOfBoundsError(MiniLaserError, ValueError):
    """The print origin plus the requested size exceeds the device field. The print is not started."""


class BusyError(MiniLaserError):
    """A print was requested while another print is running."""


class ProtocolStallError(MiniLaserError, TimeoutError):
    """
    The device never answered with the expected acknowledgement token within the retry budget.
    """

    def __init__(self, token, attempts):
        super().__init__(f"No '{token}' acknowledgement after {attempts} polls.")
        self.token = token
        self.attempts = attempts


class PrintAbortedError(MiniLaserError):
    """The print was cancelled with abort() while it was streaming."""
