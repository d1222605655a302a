from .streams import Readable, Stream, Writable
from .dummy import DummyStream

__all__ = ["Readable", "Writable", "Stream", "DummyStream"]
