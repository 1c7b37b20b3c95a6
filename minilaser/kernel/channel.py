from collections import deque
from datetime import datetime
from typing import Callable, Optional, Union


class Channel:
    """
    Channels are the logging system of minilaser. A channel is a named callable, calling it with a message
    delivers that message to every watcher. Watchers are any callable accepting a single message, `print` being the
    most common one. Channels can optionally keep a buffer of recent messages, which are replayed to new watchers.

    Usage:
        channel = Channel("minilaser/usb", buffer_size=100, timestamp=True)
        channel.watch(print)
        channel("Connected.")
    """

    def __init__(
        self,
        name: str,
        buffer_size: int = 0,
        line_end: Optional[str] = None,
        timestamp: bool = False,
        pure: bool = False,
    ):
        self.watchers = []
        self.name = name
        self.buffer_size = buffer_size
        self.line_end = line_end
        self.timestamp = timestamp
        self.pure = pure
        self.buffer = None if buffer_size == 0 else deque(maxlen=buffer_size)

    def __repr__(self):
        return f"Channel({repr(self.name)}, buffer_size={str(self.buffer_size)}, line_end={repr(self.line_end)})"

    def __call__(self, message: Union[str, bytes, bytearray], *args, indent: bool = True, **kwargs):
        if isinstance(message, (bytes, bytearray)) or self.pure:
            for w in self.watchers[:]:
                w(message)
            if self.buffer is not None:
                self.buffer.append(message)
            return
        if self.line_end is not None:
            message = message + self.line_end
        if indent:
            message = "    " + message.replace("\n", "\n    ")
        if self.timestamp:
            ts = datetime.now().strftime("[%H:%M:%S] ")
            message = ts + message.replace("\n", f"\n{ts}")
        for w in self.watchers[:]:
            w(message)
        if self.buffer is not None:
            self.buffer.append(message)

    def __len__(self):
        return self.buffer_size

    def __iadd__(self, other):
        self.watch(other)
        return self

    def __isub__(self, other):
        self.unwatch(other)
        return self

    def __bool__(self):
        """
        A channel is truthy if anything would receive its messages. Callers can skip building expensive messages
        (hex dumps of packets) for channels nobody listens to.
        """
        return bool(self.watchers) or self.buffer_size != 0

    def watch(self, monitor_function: Callable):
        for q in self.watchers:
            if q is monitor_function:
                return  # This is already being watched by that.
        self.watchers.append(monitor_function)
        if self.buffer is not None:
            for line in list(self.buffer):
                monitor_function(line)

    def unwatch(self, monitor_function: Callable):
        self.watchers.remove(monitor_function)

    def resize_buffer(self, new_size: int):
        if new_size == 0:
            self.buffer = None
        elif self.buffer is None:
            self.buffer = deque(maxlen=new_size)
        else:
            self.buffer = deque(self.buffer, maxlen=new_size)
        self.buffer_size = new_size
