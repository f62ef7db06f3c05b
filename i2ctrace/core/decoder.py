from collections import namedtuple
from enum import IntEnum


START = "START"
START_ODD = "START(odd)"
STOP = "STOP"
ADDRESS = "ADDRESS"
WRITE = "WRITE"
READ = "READ"
ACK = "ACK"
NACK = "NACK"
DATA = "DATA"

TAGS = (START, START_ODD, STOP, ADDRESS, WRITE, READ, ACK, NACK, DATA)


class Phase(IntEnum):
    IDLE = 0
    READ_ADDRESS = 1
    READ_DIRECTION = 2
    READ_ACK = 3
    READ_DATA = 4


class Transition(IntEnum):
    """What happened on the wire between two samples, before any phase is considered."""
    NONE = 0
    CLOCK_FALLING = 1
    CLOCK_LOW = 2
    START = 3
    STOP = 4
    BIT = 5


class ByteEvent(namedtuple("ByteEvent", ["timestamp", "value"])):
    __slots__ = ()

    def __repr__(self):
        return f"ByteEvent({self.timestamp}, 0x{self.value:02X})"


class TextEvent(namedtuple("TextEvent", ["timestamp", "tag"])):
    __slots__ = ()


class Diagnostic(namedtuple("Diagnostic", ["timestamp", "phase", "last_scl", "last_sda", "scl", "sda"])):
    """A transition the protocol state machine has no rule for. Not a bus event."""
    __slots__ = ()

    def __str__(self):
        return (f"unhandled transition at {self.timestamp}: phase={self.phase.name}, "
            f"lastSCL={self.last_scl}, lastSDA={self.last_sda}, scl={self.scl}, sda={self.sda}")


def classify(last_scl, last_sda, scl, sda):
    """Classify a (SCL, SDA) change. The first matching rule wins.

    START and STOP are tested before the rising edge check: both also present SCL high on the
    new sample, and a mid-high SDA transition must not be read as a data bit.
    """
    if last_scl == scl and last_sda == sda:
        return Transition.NONE
    if last_scl and not scl:
        return Transition.CLOCK_FALLING
    if not scl:
        return Transition.CLOCK_LOW
    if last_scl and last_sda and not sda:
        return Transition.START
    if last_scl and not last_sda and sda:
        return Transition.STOP
    return Transition.BIT


class Decoder:
    """Per-sample I2C decoder.

    Feed it every sample of a capture, in timestamp order, through `step`. Each call returns a
    list of the events the sample produced:
    - ByteEvent for ADDRESS and DATA bytes
    - TextEvent for every classified bus event (START, START(odd), STOP, ADDRESS, WRITE, READ,
      ACK, NACK, DATA)
    - Diagnostic when a clock edge has no meaning in the current phase (e.g. bits on an idle bus)

    A START is always honoured: outside IDLE it is reported as START(odd) and decoding restarts
    from the address.
    """
    def __init__(self):
        self.reset()
        self._bit_handlers = {
            Phase.READ_ADDRESS: self._read_address,
            Phase.READ_DIRECTION: self._read_direction,
            Phase.READ_ACK: self._read_ack,
            Phase.READ_DATA: self._read_data,
        }

    def reset(self):
        # assume we're starting with an idle bus
        self.phase = Phase.IDLE
        self.last_scl = 1
        self.last_sda = 1
        self._reset_bits()

    def _reset_bits(self):
        self.bit_position = 0
        self.accumulator = 0

    def step(self, scl, sda, timestamp):
        scl = 1 if scl else 0
        sda = 1 if sda else 0
        transition = classify(self.last_scl, self.last_sda, scl, sda)

        if transition == Transition.START:
            events = [TextEvent(timestamp, START if self.phase == Phase.IDLE else START_ODD)]
            self._reset_bits()
            self.phase = Phase.READ_ADDRESS
        elif transition == Transition.STOP:
            events = [TextEvent(timestamp, STOP)]
            self.phase = Phase.IDLE
        elif transition == Transition.BIT:
            handler = self._bit_handlers.get(self.phase)
            if handler is None:
                events = [Diagnostic(timestamp, self.phase, self.last_scl, self.last_sda, scl, sda)]
            else:
                events = handler(sda, timestamp)
        else:
            events = []

        self.last_scl = scl
        self.last_sda = sda
        return events

    def _read_address(self, sda, timestamp):
        self.accumulator |= sda << (6 - self.bit_position)
        self.bit_position += 1
        if self.bit_position < 7:
            return []
        events = [TextEvent(timestamp, ADDRESS), ByteEvent(timestamp, self.accumulator)]
        self._reset_bits()
        self.phase = Phase.READ_DIRECTION
        return events

    def _read_direction(self, sda, timestamp):
        self.phase = Phase.READ_ACK
        return [TextEvent(timestamp, READ if sda else WRITE)]

    def _read_ack(self, sda, timestamp):
        self._reset_bits()
        self.phase = Phase.READ_DATA
        return [TextEvent(timestamp, NACK if sda else ACK)]

    def _read_data(self, sda, timestamp):
        self.accumulator |= sda << (7 - self.bit_position)
        self.bit_position += 1
        if self.bit_position < 8:
            return []
        events = [ByteEvent(timestamp, self.accumulator), TextEvent(timestamp, DATA)]
        self._reset_bits()
        self.phase = Phase.READ_ACK
        return events


def create():
    return Decoder()
