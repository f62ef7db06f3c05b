import logging

from i2ctrace.core.decoder import Decoder, ByteEvent, TextEvent
from i2ctrace.core.models import group_transactions
from i2ctrace.core.timeline import Timeline


logger = logging.getLogger(__name__)


def log_diagnostic(diagnostic):
    logger.warning("%s", diagnostic)


class DecodeResult:
    def __init__(self, data, events):
        self.data = data
        self.events = events
        self.diagnostics = []
        self.samples = 0
        self.last_time = None
        self.dropped = 0
        self.truncated = None  # events_list() index of the first dropped event
        self._order = []  # which timeline each stored event went to

    def events_list(self):
        """Byte and text events, in the order the decoder produced them."""
        data = iter(self.data)
        events = iter(self.events)
        result = []
        for is_byte in self._order:
            if is_byte:
                t, value = next(data)
                result.append(ByteEvent(t + self.data.correlation_time, value))
            else:
                t, tag = next(events)
                result.append(TextEvent(t + self.events.correlation_time, tag))
        return result

    def transactions(self):
        """Transactions folded from the stored events.

        Grouping stops at the first dropped event: later bytes lost their tags, so the
        transaction in progress there is returned incomplete.
        """
        return group_transactions(self.events_list()[:self.truncated])


def decode(samples, capacity=None, correlation_time=0, on_diagnostic=None, decoder=None):
    """Run a Decoder over `samples`, an iterable of (timestamp, scl, sda).

    Bytes go to the "I2CData" timeline, tags to the "I2CEvents" timeline. Diagnostics are kept
    in the result and passed to `on_diagnostic` (logged as warnings by default).
    Events that do not fit in `capacity` slots are counted in `dropped`.
    """
    if decoder is None:
        decoder = Decoder()
    if on_diagnostic is None:
        on_diagnostic = log_diagnostic

    data = Timeline("I2CData", capacity, width=8, kind="integral",
        correlation_time=correlation_time)
    events = Timeline("I2CEvents", capacity, width=16, kind="text",
        correlation_time=correlation_time)
    result = DecodeResult(data, events)

    for time, scl, sda in samples:
        for event in decoder.step(scl, sda, time):
            if isinstance(event, ByteEvent):
                stored = data.replace_next(event.timestamp, event.value)
            elif isinstance(event, TextEvent):
                stored = events.replace_next(event.timestamp, event.tag)
            else:
                result.diagnostics.append(event)
                on_diagnostic(event)
                continue
            if stored:
                result._order.append(isinstance(event, ByteEvent))
            else:
                if result.truncated is None:
                    result.truncated = len(result._order)
                result.dropped += 1
        result.samples += 1
        result.last_time = time

    logger.debug("decoded %d samples: %d bytes, %d events, %d diagnostics", result.samples,
        data.position, events.position, len(result.diagnostics))
    return result


def format_result(result):
    """Text rendering of a DecodeResult, one line per event."""
    lines = []
    for event in result.events_list():
        if isinstance(event, ByteEvent):
            lines.append(f"{event.timestamp:>12}  {'':<10}  0x{event.value:02X}")
        else:
            lines.append(f"{event.timestamp:>12}  {event.tag:<10}")
    for diagnostic in result.diagnostics:
        lines.append(f"warning: {diagnostic}")
    return lines
